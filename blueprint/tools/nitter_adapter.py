import asyncio
import httpx
import logging
from typing import List
from blueprint.config import settings
from blueprint.feeds_config import AVATAR_FALLBACK_TEMPLATE, NITTER_FEED_TEMPLATE
from blueprint.models.items import ContentItem, FetchOutcome, SourceProfile
from blueprint.services.fallback import CandidateChain, CandidatesExhausted
from blueprint.tools.base_adapter import SourceAdapter
from blueprint.tools.feed_parser import MalformedFeedError, extract_items, extract_profile

logger = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; PersonaBlueprint/1.0)",
    "Accept": "application/rss+xml, application/xml, text/xml",
}

class SourceRejected(Exception):
    """An instance answered, but not with something we can use."""

class NitterAdapter(SourceAdapter):
    """
    Walks the Nitter instances in order and stops at the first one that
    serves enough posts. Instances are never queried in parallel: when one is
    down its neighbours usually are too, and they are shared by everybody.
    """

    def __init__(
        self,
        instances: List[str] = None,
        timeout: float = None,
        min_items: int = None,
        max_items: int = None,
        transport: httpx.AsyncBaseTransport = None,
    ):
        self.instances = instances or settings.NITTER_INSTANCES
        self.timeout = timeout or settings.FETCH_TIMEOUT
        self.min_items = min_items or settings.MIN_ITEM_COUNT
        self.max_items = max_items or settings.MAX_ITEM_COUNT
        self._transport = transport

    async def fetch(self, handle: str) -> FetchOutcome:
        handle = handle.lstrip("@").lower()
        logger.info(f"Fetching posts for @{handle} ({len(self.instances)} instances)")

        async with httpx.AsyncClient(
            headers=HEADERS,
            timeout=self.timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            chain = CandidateChain(
                [(instance, self._bind(client, instance, handle)) for instance in self.instances],
                skip=(SourceRejected, MalformedFeedError, httpx.HTTPError, asyncio.TimeoutError),
                name="nitter",
            )
            try:
                outcome = await chain.arun()
            except CandidatesExhausted as e:
                logger.warning(f"All Nitter instances failed for @{handle}: {e.last()}")
                return FetchOutcome(
                    success=False,
                    items=[],
                    profile=SourceProfile(
                        handle=handle,
                        display_name=handle,
                        avatar_url=AVATAR_FALLBACK_TEMPLATE.format(handle=handle),
                    ),
                    origin="unavailable",
                )

        logger.info(f"Fetched {len(outcome.items)} posts for @{handle} from {outcome.source}")
        return outcome

    def _bind(self, client: httpx.AsyncClient, instance: str, handle: str):
        # The client timeout applies per read, not to the whole download
        return lambda: asyncio.wait_for(self._fetch_from_instance(client, instance, handle), self.timeout)

    async def _fetch_from_instance(self, client: httpx.AsyncClient, instance: str, handle: str) -> FetchOutcome:
        url = NITTER_FEED_TEMPLATE.format(instance=instance.rstrip("/"), handle=handle)
        logger.debug(f"Trying Nitter instance: {instance}")

        try:
            resp = await client.get(url)
        except httpx.TimeoutException:
            logger.warning(f"Nitter {instance} timed out")
            raise

        if not resp.is_success:
            logger.warning(f"Nitter {instance} returned {resp.status_code}")
            raise SourceRejected(f"HTTP {resp.status_code}")

        items: List[ContentItem] = extract_items(resp.content)
        if len(items) < self.min_items:
            logger.warning(f"Nitter {instance} returned too few posts ({len(items)})")
            raise SourceRejected(f"only {len(items)} usable posts")

        return FetchOutcome(
            success=True,
            items=items[: self.max_items],
            profile=extract_profile(resp.content, handle),
            origin="live",
            source=instance,
        )
