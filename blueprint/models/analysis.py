"""
The analysis payload produced by the model.

Every field is required and scalar fields only accept real strings: a string
where a list is expected (or a missing ``themes``) rejects the whole payload
rather than coercing it. Wire names are camelCase.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, StrictStr
from pydantic.alias_generators import to_camel


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class StyleSnapshot(_Payload):
    tone: StrictStr
    typical_length: StrictStr
    emoji_usage: StrictStr
    formatting_habits: StrictStr


class Beliefs(_Payload):
    pushes: List[StrictStr]
    avoids: List[StrictStr]


class Rationale(_Payload):
    hooks: StrictStr
    psychology: StrictStr
    audience_fit: StrictStr


class StructuredAnalysis(_Payload):
    style_snapshot: StyleSnapshot
    themes: List[StrictStr]
    beliefs: Beliefs
    formulas: List[StrictStr]
    rationale: Rationale
    example_content: List[StrictStr]


class GenerationOutcome(BaseModel):
    success: bool
    payload: Optional[StructuredAnalysis] = None
    error_class: Literal["none", "transient", "fatal"] = "none"
    error: Optional[str] = None
