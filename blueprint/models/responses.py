from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, List, Literal, Optional

from blueprint.models.analysis import StructuredAnalysis
from blueprint.models.items import SourceProfile

class AnalyzeRequest(BaseModel):
    # Older clients post {"username": ...}
    handle: Optional[Any] = Field(default=None, validation_alias=AliasChoices("handle", "username"))

class ResponseMeta(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    item_count: int
    generated_at: str
    disclaimer: str
    degraded: bool

class AnalyzeResponse(BaseModel):
    profile: SourceProfile
    analysis: StructuredAnalysis
    meta: ResponseMeta

class ErrorResponse(BaseModel):
    error: str
    code: Optional[str] = None

class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str

class ChatRequest(BaseModel):
    handle: str = Field(validation_alias=AliasChoices("handle", "username"))
    persona: StructuredAnalysis
    messages: List[ChatMessage] = Field(min_length=1)

class ChatResponse(BaseModel):
    reply: str
