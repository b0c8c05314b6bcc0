from __future__ import annotations

from playwright.sync_api import Error as PlaywrightError, Page, sync_playwright

from .models import CartPage

# Chrome started with --remote-debugging-port=9222, logged into the store.
DEFAULT_CDP_URL = "http://localhost:9222"

CART_URL_HINTS = ("/cart", "/gp/cart")


def _pick_cart_page(pages: list[Page]) -> Page:
    """Prefer an open cart tab; otherwise use the first tab."""
    for page in pages:
        if any(h in (page.url or "") for h in CART_URL_HINTS):
            return page
    return pages[0]


def capture_cart_page(cdp_url: str = DEFAULT_CDP_URL, *, navigate_to: str | None = None) -> CartPage:
    """Snapshot the cart tab of an already running, logged-in browser.

    Connects over CDP and reuses the existing context so the store session
    cookies come along; they are returned for the product page fetches.
    """
    with sync_playwright() as p:
        try:
            browser = p.chromium.connect_over_cdp(cdp_url)
        except PlaywrightError as e:
            raise RuntimeError(f"Could not connect to browser at {cdp_url}: {e}") from e
        try:
            if not browser.contexts or not browser.contexts[0].pages:
                raise RuntimeError(f"No open browser tabs at {cdp_url}")
            ctx = browser.contexts[0]
            page = _pick_cart_page(ctx.pages)

            if navigate_to:
                page.goto(navigate_to, wait_until="domcontentloaded", timeout=45_000)
                page.wait_for_timeout(1500)

            html = page.content()
            cookies = {c["name"]: c["value"] for c in ctx.cookies(page.url)}
            return CartPage(html=html, url=page.url, cookies=cookies)
        finally:
            browser.close()
