from __future__ import annotations

from collections.abc import Callable

from bs4 import BeautifulSoup, Tag

# Document-parsing capability: raw markup -> navigable tree.
DocumentParser = Callable[[str], BeautifulSoup]


def parse_document(html: str | bytes) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def text_of(el: Tag | None) -> str:
    """All descendant text, concatenated without separators."""
    if el is None:
        return ""
    return el.get_text()


def select_first(root: Tag, selectors: tuple[str, ...] | list[str]) -> Tag | None:
    """First selector in *selectors* that matches anything wins."""
    for sel in selectors:
        el = root.select_one(sel)
        if el is not None:
            return el
    return None


def closest(el: Tag, selector: str) -> Tag | None:
    """Nearest inclusive ancestor matching *selector*."""
    return el.css.closest(selector)


def next_element(el: Tag) -> Tag | None:
    return el.find_next_sibling()


def body_of(doc: BeautifulSoup) -> Tag:
    return doc.body if doc.body is not None else doc
