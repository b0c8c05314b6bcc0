from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any
from urllib.parse import urlsplit

from .dom import DocumentParser, parse_document
from .errors import CartAllergensError
from .extract import NO_INGREDIENTS_TEXT, extract
from .fetch import DEFAULT_BATCH_SIZE, FetchScheduler, PageFetcher
from .locate import UNKNOWN_PRODUCT, locate_cart_items
from .match import check_allergies
from .models import CartItemRef, CartPage, FetchOutcome, ScrapeResult
from .normalize import clean_title
from .synonyms import DEFAULT_SYNONYMS, SynonymTable

logger = logging.getLogger(__name__)

SCRAPE_ACTION = "scrapeCart"
FETCH_FAILED_TEXT = "Failed to load product page"

# Product id in /dp/<ASIN> or /gp/product/<ASIN> links.
_PRODUCT_ID_RE = re.compile(r"/(?:dp|gp/product)/([A-Z0-9]{10})(?:[/?]|$)", re.IGNORECASE)


def url_key(url: str) -> str:
    """Identity of a product link across alternate anchor formats.

    Links sharing a product id are one product. Any other link keeps its
    query string; only the fragment and a trailing slash are ignored.
    """
    m = _PRODUCT_ID_RE.search(url)
    parts = urlsplit(url)
    if m:
        return f"{parts.netloc.lower()}/dp/{m.group(1).upper()}"
    key = f"{parts.netloc.lower()}{parts.path.rstrip('/')}"
    if parts.query:
        key += "?" + parts.query
    return key


def assemble_results(results: Iterable[ScrapeResult]) -> list[ScrapeResult]:
    """Final presentation pass over per-item results, order preserved.

    Later results whose link points at an already-listed product are dropped,
    and titles made only of link accessibility text fall back to the
    generic product title.
    """
    seen: set[str] = set()
    out: list[ScrapeResult] = []
    for r in results:
        key = url_key(r.url)
        if key in seen:
            logger.debug("ASSEMBLE drop duplicate url=%s", r.url)
            continue
        seen.add(key)
        title = clean_title(r.title)
        if title != r.title or not title:
            r = replace(r, title=title or UNKNOWN_PRODUCT)
        out.append(r)
    return out


def failed_count(results: Sequence[ScrapeResult]) -> int:
    return sum(1 for r in results if r.error is not None)


@dataclass(frozen=True)
class CartScanner:
    """Locate -> fetch -> extract -> match over one cart snapshot."""

    fetch_page: PageFetcher
    width: int = DEFAULT_BATCH_SIZE
    synonyms: SynonymTable = DEFAULT_SYNONYMS
    parser: DocumentParser = parse_document

    def locate(self, page: CartPage) -> list[CartItemRef]:
        return locate_cart_items(page.html, page.url, parser=self.parser)

    def process(self, outcome: FetchOutcome, allergies: Sequence[str]) -> ScrapeResult:
        item = outcome.item
        if outcome.fetch_error is not None:
            return ScrapeResult(url=item.url, title=item.title, ingredients=FETCH_FAILED_TEXT, error=outcome.fetch_error)

        try:
            extraction = extract(outcome.html or "", parser=self.parser)
            if extraction.parse_error is None:
                match = check_allergies(extraction.ingredients, allergies, table=self.synonyms)
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            logger.warning("EXTRACT failed url=%s error=%s", item.url, message)
            return ScrapeResult(
                url=item.url,
                title=item.title,
                ingredients=NO_INGREDIENTS_TEXT,
                error=f"Failed to parse product page: {message}",
            )

        if extraction.parse_error is not None:
            logger.info("EXTRACT none title=%s", item.title)
            return ScrapeResult(
                url=item.url,
                title=item.title,
                ingredients=extraction.ingredients,
                error=extraction.parse_error,
            )

        return ScrapeResult(
            url=item.url,
            title=item.title,
            ingredients=extraction.ingredients,
            allergy_found=match.found,
            allergy_matches=match.matches,
        )

    async def scrape(self, page: CartPage, allergies: Sequence[str] = ()) -> list[ScrapeResult]:
        """Scan every product of the cart; raises only for locator failures."""
        items = self.locate(page)
        scheduler = FetchScheduler(self.fetch_page, width=self.width)
        results = await scheduler.run(items, lambda outcome: self.process(outcome, allergies))
        results = assemble_results(results)

        failed = failed_count(results)
        if failed:
            logger.info(
                "SCAN Successfully found ingredients for %d out of %d products",
                len(results) - failed, len(results),
            )
        return results

    async def handle_message(self, message: Mapping[str, Any], page: CartPage) -> dict[str, Any]:
        """Answer a ``{"action": "scrapeCart", "allergies": [...]}`` request."""
        action = message.get("action")
        if action != SCRAPE_ACTION:
            return error_response(f"Unknown action: {action}")

        raw = message.get("allergies") or []
        if isinstance(raw, str):
            raw = [raw]
        elif not isinstance(raw, (list, tuple)):
            return error_response("allergies must be a list of strings")
        allergies = [str(a) for a in raw]
        try:
            results = await self.scrape(page, allergies)
        except CartAllergensError as exc:
            logger.warning("SCAN failed error=%s", exc)
            return error_response(str(exc))
        return success_response(results)


def success_response(results: Sequence[ScrapeResult]) -> dict[str, Any]:
    return {"success": True, "results": [r.to_dict() for r in results]}


def error_response(message: str) -> dict[str, Any]:
    return {"success": False, "error": message}
