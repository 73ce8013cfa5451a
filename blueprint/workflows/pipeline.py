import re
from datetime import datetime, timezone
from typing import List, Tuple

from blueprint.config import settings
from blueprint.errors import (
    AcquisitionExhausted,
    BlueprintError,
    GenerationExhausted,
    InternalError,
    RateLimitedError,
    ValidationError,
)
from blueprint.fallback_data import FallbackDataset, fallback_dataset
from blueprint.feeds_config import AVATAR_FALLBACK_TEMPLATE
from blueprint.models.analysis import StructuredAnalysis
from blueprint.models.items import ContentItem, SourceProfile
from blueprint.models.responses import AnalyzeResponse, ResponseMeta
from blueprint.services.logger import logger
from blueprint.services.rate_limiter import RateLimiter
from blueprint.tools.analyzer import Analyzer
from blueprint.tools.base_adapter import SourceAdapter
from blueprint.tools.nitter_adapter import NitterAdapter

HANDLE_RE = re.compile(r"^[A-Za-z0-9_]{1,15}$")
SUBSTITUTION_PREFIX = "Demo: "


def normalize_handle(raw_handle) -> str:
    """Strip whitespace and a leading '@', lowercase, then check the shape."""
    if not raw_handle or not isinstance(raw_handle, str):
        raise ValidationError("Username is required", code="MISSING_USERNAME")

    handle = raw_handle.strip()
    if handle.startswith("@"):
        handle = handle[1:]
    handle = handle.strip().lower()

    if not HANDLE_RE.match(handle):
        raise ValidationError("Invalid username format.", code="INVALID_USERNAME")
    return handle


class Pipeline:
    def __init__(
        self,
        rate_limiter: RateLimiter | None = None,
        adapter: SourceAdapter | None = None,
        analyzer: Analyzer | None = None,
        dataset: FallbackDataset | None = None,
    ):
        self.rate_limiter = rate_limiter or RateLimiter()
        self.adapter = adapter or NitterAdapter()
        # A live fetch is judged by the same floor the adapter walks with
        self.min_items = getattr(self.adapter, "min_items", None) or settings.MIN_ITEM_COUNT
        self.analyzer = analyzer or Analyzer(min_items=self.min_items)
        self.dataset = dataset or fallback_dataset

    async def run(self, raw_handle, client_key: str) -> AnalyzeResponse:
        """
        Main entry point:
        1. Validation + admission (rate limit)
        2. Acquisition (Nitter -> fallback dataset)
        3. Generation (Gemini -> fallback dataset, skipped when degraded)
        4. Assembly
        """
        handle = normalize_handle(raw_handle)
        self.admit(client_key)

        try:
            return await self._run(handle)
        except BlueprintError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error analysing @{handle}: {e}")
            raise InternalError() from e

    def admit(self, client_key: str):
        if not self.rate_limiter.admit(client_key):
            retry_after = self.rate_limiter.retry_after(client_key)
            logger.warning(f"Rate limited {client_key} (retry in {retry_after}s)")
            raise RateLimitedError(retry_after)

    async def _run(self, handle: str) -> AnalyzeResponse:
        logger.info(f"Analyzing @{handle}...")
        profile, items, analysis, degraded = await self.acquire(handle)

        if analysis is None:
            analysis, degraded = await self.generate(handle, items)

        return self.assemble(handle, profile, items, analysis, degraded)

    async def acquire(
        self, handle: str
    ) -> Tuple[SourceProfile, List[ContentItem], StructuredAnalysis | None, bool]:
        try:
            profile, items = await self.fetch_live(handle)
            return profile, items, None, False
        except AcquisitionExhausted as e:
            logger.info(f"Live fetch failed ({e.message}), using fallback data...")

        entry = self.dataset.get(handle)
        if entry is not None:
            return entry.profile, list(entry.items), entry.analysis, True

        entry = self.dataset.random_entry()
        profile = entry.profile.model_copy(
            update={"display_name": f"{SUBSTITUTION_PREFIX}{entry.profile.display_name}"}
        )
        logger.info(f"No fallback entry for @{handle}, substituting @{entry.profile.handle}")
        return profile, list(entry.items), entry.analysis, True

    async def fetch_live(self, handle: str) -> Tuple[SourceProfile, List[ContentItem]]:
        outcome = await self.adapter.fetch(handle)
        if not outcome.success:
            raise AcquisitionExhausted("Could not fetch live posts")
        if len(outcome.items) < self.min_items:
            raise AcquisitionExhausted(f"only {len(outcome.items)} live posts")
        return outcome.profile, list(outcome.items)

    async def generate(self, handle: str, items: List[ContentItem]) -> Tuple[StructuredAnalysis, bool]:
        logger.info(f"Running Gemini analysis on {len(items)} posts...")
        outcome = await self.analyzer.analyze(handle, items)
        if outcome.success and outcome.payload is not None:
            return outcome.payload, False

        logger.info(f"AI failed ({outcome.error_class}), falling back to dataset...")
        entry = self.dataset.get(handle)
        if entry is None:
            # Only acquisition failures may borrow another account's blueprint
            raise GenerationExhausted(outcome.error or "Analysis failed.")
        return entry.analysis, True

    def assemble(
        self,
        handle: str,
        profile: SourceProfile,
        items: List[ContentItem],
        analysis: StructuredAnalysis,
        degraded: bool,
    ) -> AnalyzeResponse:
        return AnalyzeResponse(
            profile=SourceProfile(
                handle=profile.handle,
                display_name=profile.display_name,
                avatar_url=profile.avatar_url or AVATAR_FALLBACK_TEMPLATE.format(handle=handle),
                bio=profile.bio,
            ),
            analysis=analysis,
            meta=ResponseMeta(
                item_count=len(items),
                generated_at=datetime.now(timezone.utc).isoformat(),
                disclaimer=settings.DISCLAIMER,
                degraded=degraded,
            ),
        )


pipeline = Pipeline()
