"""Shared fixtures and fakes for the blueprint test-suite."""

from __future__ import annotations

import asyncio
import copy
import os
import random

os.environ.setdefault("LOG_TO_FILE", "false")

import pytest

from blueprint.fallback_data import DEMO_ACCOUNTS, FallbackDataset
from blueprint.models.analysis import GenerationOutcome, StructuredAnalysis
from blueprint.models.items import ContentItem, FetchOutcome, SourceProfile
from blueprint.services.logger import logger
from blueprint.services.rate_limiter import RateLimiter
from blueprint.workflows.pipeline import Pipeline


ANALYSIS = {
    "styleSnapshot": {
        "tone": "Dry, technical, quietly confident.",
        "typicalLength": "Medium (120-200 characters).",
        "emojiUsage": "None.",
        "formattingHabits": "Short paragraphs, code snippets, no hashtags.",
    },
    "themes": ["Databases", "Distributed systems", "Performance"],
    "beliefs": {
        "pushes": ["Measure before optimising", "Boring tech wins"],
        "avoids": ["Hype cycles"],
    },
    "formulas": ["Benchmark -> surprising result -> lesson"],
    "rationale": {
        "hooks": "Opens with a concrete number.",
        "psychology": "Curiosity and authority.",
        "audienceFit": "Backend engineers who like evidence.",
    },
    "exampleContent": [
        "We cut p99 latency by 40% by deleting a cache. Sometimes the fix is less code.",
    ],
}


@pytest.fixture
def analysis_dict() -> dict:
    return copy.deepcopy(ANALYSIS)


@pytest.fixture
def analysis(analysis_dict) -> StructuredAnalysis:
    return StructuredAnalysis.model_validate(analysis_dict)


def make_rss(
    texts: list[str],
    title: str = "Tibo / @tibo_maker",
    description: str = "Building in public",
    image: str = "https://pbs.twimg.com/profile_images/1/avatar_400x400.jpg",
) -> bytes:
    items = "".join(
        "<item>"
        f"<title><![CDATA[{text[:30]}]]></title>"
        f"<description><![CDATA[<p>{text}</p>]]></description>"
        "<pubDate>Mon, 01 Jan 2024 12:00:00 GMT</pubDate>"
        "</item>"
        for text in texts
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel>'
        f"<title>{title}</title>"
        f"<description>{description}</description>"
        f"<image><url>{image}</url><title>{title}</title></image>"
        f"{items}"
        "</channel></rss>"
    ).encode("utf-8")


def posts(n: int) -> list[str]:
    return [f"Post number {i} about shipping small products every week" for i in range(1, n + 1)]


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAdapter:
    def __init__(
        self,
        outcome: FetchOutcome | None = None,
        error: Exception | None = None,
        min_items: int | None = None,
    ) -> None:
        self.outcome = outcome
        self.error = error
        self.min_items = min_items
        self.calls: list[str] = []

    async def fetch(self, handle: str) -> FetchOutcome:
        self.calls.append(handle)
        if self.error:
            raise self.error
        if self.outcome is not None:
            return self.outcome
        return unavailable(handle)


class FakeAnalyzer:
    def __init__(self, outcome: GenerationOutcome) -> None:
        self.outcome = outcome
        self.calls: list[tuple[str, list[ContentItem]]] = []

    async def analyze(self, handle: str, items: list[ContentItem]) -> GenerationOutcome:
        self.calls.append((handle, items))
        return self.outcome


def unavailable(handle: str) -> FetchOutcome:
    return FetchOutcome(
        success=False,
        items=[],
        profile=SourceProfile(handle=handle, display_name=handle),
        origin="unavailable",
    )


def live(handle: str, n: int = 5, display_name: str = "Live Person") -> FetchOutcome:
    return FetchOutcome(
        success=True,
        items=[ContentItem(text=text) for text in posts(n)],
        profile=SourceProfile(handle=handle, display_name=display_name, avatar_url="", bio="live bio"),
        origin="live",
        source="https://nitter.example",
    )


@pytest.fixture
def log_records() -> list[dict]:
    records: list[dict] = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(sink_id)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(clock) -> RateLimiter:
    return RateLimiter(max_requests=10, window=60, clock=clock)


@pytest.fixture
def dataset() -> FallbackDataset:
    return FallbackDataset.from_raw(DEMO_ACCOUNTS, rng=random.Random(7))


@pytest.fixture
def make_pipeline(rate_limiter, dataset):
    def _make(adapter=None, analyzer=None) -> Pipeline:
        return Pipeline(
            rate_limiter=rate_limiter,
            adapter=adapter or FakeAdapter(),
            analyzer=analyzer or FakeAnalyzer(GenerationOutcome(success=False, error_class="transient", error="boom")),
            dataset=dataset,
        )

    return _make


async def drip(body: bytes, chunks: int, delay: float):
    """Streams a body in slices with a pause before each one."""
    step = max(1, len(body) // chunks)
    for start in range(0, len(body), step):
        await asyncio.sleep(delay)
        yield body[start:start + step]
