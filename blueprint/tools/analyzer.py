from typing import List

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from blueprint.config import settings
from blueprint.errors import GenerationAuthError, GenerationError, PayloadInvalid
from blueprint.models.analysis import GenerationOutcome
from blueprint.models.items import ContentItem
from blueprint.services.llm import GeminiClient, llm
from blueprint.services.logger import logger
from blueprint.tools.prompts import build_analysis_prompt
from blueprint.tools.validator import parse_analysis


class Analyzer:
    """Turns a handle's posts into a validated StructuredAnalysis."""

    def __init__(
        self,
        client: GeminiClient | None = None,
        max_attempts: int | None = None,
        retry_delay: float | None = None,
        min_items: int | None = None,
    ):
        self.client = client or llm
        self.max_attempts = max_attempts or settings.ANALYSIS_MAX_ATTEMPTS
        self.retry_delay = retry_delay if retry_delay is not None else settings.ANALYSIS_RETRY_DELAY
        self.min_items = min_items or settings.MIN_ITEM_COUNT

    async def analyze(self, handle: str, items: List[ContentItem]) -> GenerationOutcome:
        if len(items) < self.min_items:
            return GenerationOutcome(
                success=False,
                error_class="transient",
                error=f"Not enough posts to analyze (minimum {self.min_items} required)",
            )

        prompt = build_analysis_prompt(handle, items)
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.retry_delay),
            # A bad key stays bad; only transient failures earn a second attempt
            retry=retry_if_exception_type(GenerationError) & retry_if_not_exception_type(GenerationAuthError),
            before_sleep=lambda retry_state: logger.warning(
                f"Analysis failed, retrying in {retry_state.next_action.sleep} seconds... (attempt {retry_state.attempt_number})"
            ),
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    logger.info(f"Gemini analysis attempt {attempt.retry_state.attempt_number}/{self.max_attempts}")
                    text = await self.client.generate(prompt)
                    analysis = parse_analysis(text)
                    if analysis is None:
                        logger.error(f"Failed to parse Gemini response: {text[:500]}")
                        raise PayloadInvalid("Failed to parse AI response")
        except GenerationAuthError as e:
            logger.error(f"Gemini analysis aborted: {e.message}")
            return GenerationOutcome(success=False, error_class="fatal", error=e.message)
        except GenerationError as e:
            logger.error(f"Gemini analysis error: {e.message}")
            return GenerationOutcome(success=False, error_class="transient", error=e.message)

        logger.info("Gemini analysis successful")
        return GenerationOutcome(success=True, payload=analysis)
