
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Literal

class ContentItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    timestamp: Optional[str] = None  # as published by the source, unparsed

    def to_prompt_string(self, position: int) -> str:
        return f'{position}. "{self.text}"'

class SourceProfile(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    handle: str
    display_name: str
    avatar_url: str = ""
    bio: str = ""

class FetchOutcome(BaseModel):
    success: bool
    items: List[ContentItem] = Field(default_factory=list)
    profile: SourceProfile
    origin: Literal["live", "unavailable"]
    source: Optional[str] = None  # instance that served the items
