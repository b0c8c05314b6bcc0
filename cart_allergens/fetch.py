from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

from .http import HttpClient
from .models import CartItemRef, FetchOutcome

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5

R = TypeVar("R")

# Page-fetching capability: absolute URL -> HTML body, raising on failure.
PageFetcher = Callable[[str], Awaitable[str]]


def threaded_fetcher(client: HttpClient) -> PageFetcher:
    """Run the blocking client off the event loop."""

    async def fetch(url: str) -> str:
        return await asyncio.to_thread(client.get_html, url)

    return fetch


def _identity(outcome: FetchOutcome) -> Any:
    return outcome


class FetchScheduler:
    """Fetches items in consecutive windows of at most ``width`` requests.

    A window only starts after every fetch of the previous one resolved.
    Results land at their item's index, so completion order never leaks
    into the output.
    """

    def __init__(self, fetch_page: PageFetcher, *, width: int = DEFAULT_BATCH_SIZE):
        if width < 1:
            raise ValueError(f"batch width must be >= 1, got {width}")
        self.fetch_page = fetch_page
        self.width = width

    def windows(self, items: Sequence[CartItemRef]) -> list[range]:
        return [range(start, min(start + self.width, len(items))) for start in range(0, len(items), self.width)]

    async def fetch_one(self, item: CartItemRef) -> FetchOutcome:
        """Fetch a single item; failures become the outcome's ``fetch_error``."""
        try:
            html = await self.fetch_page(item.url)
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            logger.warning("FETCH failed url=%s error=%s", item.url, message)
            return FetchOutcome(item=item, fetch_error=message)
        return FetchOutcome(item=item, html=html)

    async def run(
        self,
        items: Sequence[CartItemRef],
        handle: Callable[[FetchOutcome], R] = _identity,
    ) -> list[R]:
        """Fetch every item and apply *handle* to each outcome as it resolves."""
        results: list[Any] = [None] * len(items)
        admission = asyncio.Semaphore(self.width)

        async def fetch_into(index: int) -> None:
            async with admission:
                outcome = await self.fetch_one(items[index])
            results[index] = handle(outcome)

        windows = self.windows(items)
        for n, window in enumerate(windows, 1):
            logger.info("FETCH window=%d/%d size=%d", n, len(windows), len(window))
            await asyncio.gather(*(fetch_into(i) for i in window))

        return results
