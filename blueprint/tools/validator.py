"""
Fail-closed extraction of a StructuredAnalysis from raw model output.

Either every required field is present with the right shape, or the result
is None. There is no partially validated analysis.
"""
import re
from typing import Optional

from pydantic import ValidationError

from blueprint.models.analysis import StructuredAnalysis
from blueprint.services.fallback import CandidateChain, CandidatesExhausted
from blueprint.services.logger import logger

FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def strip_fences(text: str) -> str:
    return FENCE_RE.sub("", text).strip()


def first_object(text: str) -> str:
    match = OBJECT_RE.search(text)
    if not match:
        raise ValueError("no JSON object in response")
    return match.group(0)


def parse_analysis(raw_text: str | None) -> Optional[StructuredAnalysis]:
    if not raw_text:
        return None

    chain = CandidateChain(
        [
            ("strict", lambda: StructuredAnalysis.model_validate_json(strip_fences(raw_text))),
            ("embedded object", lambda: StructuredAnalysis.model_validate_json(first_object(raw_text))),
        ],
        # pydantic's ValidationError covers both bad JSON and a bad shape
        skip=(ValidationError, ValueError),
        name="validator",
    )
    try:
        return chain.run()
    except CandidatesExhausted as e:
        logger.warning(f"Rejected model output: {e.failures[-1][:200]}")
        return None
