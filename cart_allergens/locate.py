from __future__ import annotations

import logging
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup, Tag

from .dom import DocumentParser, parse_document, select_first
from .errors import CartNotFoundError, MissingHrefError, NoItemsFoundError
from .models import CartItemRef
from .normalize import clean_title

logger = logging.getLogger(__name__)

UNKNOWN_PRODUCT = "Unknown Product"

# Priority order matters: the first selector that resolves is the cart.
CART_SELECTORS = (
    "#sc-expanded-cart-localmarket",
    ".sc-list-body",
    ".sc-list-item-content",
    ".sc-list-items",
    ".a-container",
)

# One selector group: matches come back in document order.
ITEM_SELECTOR = ".sc-list-item, .sc-list-item-content, .sc-product-item"

# Tried per item node, first hit wins.
ANCHOR_SELECTORS = (
    "a.sc-product-link",
    ".a-link-normal",
    "a[href*='/dp/']",
)


def to_absolute(href: str | None, base_url: str) -> str:
    """Resolve *href* against the origin of *base_url*."""
    if not href:
        raise MissingHrefError()
    parts = urlsplit(base_url)
    origin = f"{parts.scheme}://{parts.netloc}/" if parts.scheme and parts.netloc else base_url
    return urljoin(origin, href)


def find_cart_root(doc: BeautifulSoup | Tag) -> Tag:
    root = select_first(doc, CART_SELECTORS)
    if root is None:
        raise CartNotFoundError()
    return root


def _item_ref(node: Tag, base_url: str) -> CartItemRef:
    anchor = select_first(node, ANCHOR_SELECTORS)
    href = anchor.get("href") if anchor is not None else None
    title = clean_title(anchor.get_text()) if anchor is not None else ""
    return CartItemRef(url=to_absolute(href, base_url), title=title or UNKNOWN_PRODUCT)


def locate_items(cart_root: Tag, base_url: str) -> list[CartItemRef]:
    """Unique product refs under *cart_root*, in first-seen order."""
    seen: set[str] = set()
    out: list[CartItemRef] = []
    for node in cart_root.select(ITEM_SELECTOR):
        try:
            ref = _item_ref(node, base_url)
        except MissingHrefError as exc:
            logger.debug("LOCATE skip node=%s reason=%s", node.name, exc)
            continue
        if ref.url in seen:
            continue
        seen.add(ref.url)
        out.append(ref)

    logger.info("LOCATE found=%d", len(out))
    if not out:
        raise NoItemsFoundError()
    return out


def locate_cart_items(html: str, base_url: str, *, parser: DocumentParser = parse_document) -> list[CartItemRef]:
    doc = parser(html)
    return locate_items(find_cart_root(doc), base_url)
