from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from bs4 import BeautifulSoup

from .dom import DocumentParser, body_of, closest, next_element, parse_document, text_of
from .errors import NoIngredientsFound
from .models import ExtractionOutcome
from .normalize import clean_title, strip_label

logger = logging.getLogger(__name__)

NO_INGREDIENTS_TEXT = "No ingredients found"
UNKNOWN_CATEGORY = "Unknown category"

_LABEL_RE = re.compile(r"ingredients", re.IGNORECASE)
# Free text: value runs to the first period.
_SENTENCE_RE = re.compile(r"Ingredients[:\s]*([^.]+)", re.IGNORECASE)
# Block text: value runs to the first newline or period.
_LINE_RE = re.compile(r"Ingredients[:\s]*([^\n.]+)", re.IGNORECASE)

DETAIL_BULLET_ITEMS = "#detailBullets_feature_div li"
DETAIL_TABLE_ROWS = "#productDetails_detailBullets_sections1 tr, #productDetails tr, .prodDetTable tr, .a-keyvalue tr"
FEATURE_BULLETS = "#feature-bullets, .a-unordered-list"
IMPORTANT_INFO = "#importantInformation, #important-information, .important-information, .product-facts"
IMPORTANT_INFO_HEADINGS = "h5, h4, h3, b, strong, .a-text-bold"
ANY_HEADING = "h1, h2, h3, h4, h5, h6, .a-section .a-text-bold"
HEADING_SECTION = ".a-section, div"
NUTRITION_FACTS = ".nutritionFacts, #nutrition-facts, .nutrition-facts"
BREADCRUMBS = "#wayfinding-breadcrumbs_feature_div, .a-breadcrumb"


Strategy = Callable[[BeautifulSoup], "str | None"]


@dataclass(frozen=True)
class NamedStrategy:
    name: str
    run: Strategy


def _is_label(text: str | None) -> bool:
    return bool(text) and _LABEL_RE.search(text) is not None


def _regex_value(pattern: re.Pattern[str], text: str) -> str | None:
    m = pattern.search(text)
    if m is None:
        return None
    return m.group(1).strip() or None


def labeled_list_item(doc: BeautifulSoup) -> str | None:
    """``<li><span class="a-text-bold">Ingredients:</span> ...</li>``"""
    for li in doc.select(DETAIL_BULLET_ITEMS):
        label = li.select_one("span.a-text-bold")
        if label is not None and _is_label(text_of(label)):
            return strip_label(text_of(li)) or None
    return None


def labeled_table_row(doc: BeautifulSoup) -> str | None:
    """``<tr><th>Ingredients</th><td>...</td></tr>``"""
    for row in doc.select(DETAIL_TABLE_ROWS):
        th = row.find("th")
        if th is not None and _is_label(text_of(th)):
            value = text_of(row.find("td")).strip()
            if value:
                return value
    return None


def feature_bullet_text(doc: BeautifulSoup) -> str | None:
    block = doc.select_one(FEATURE_BULLETS)
    if block is None:
        return None
    return _regex_value(_SENTENCE_RE, text_of(block))


def labeled_info_section(doc: BeautifulSoup) -> str | None:
    section = doc.select_one(IMPORTANT_INFO)
    if section is None:
        return None

    for heading in section.select(IMPORTANT_INFO_HEADINGS):
        if not _is_label(text_of(heading)):
            continue
        info = text_of(next_element(heading)).strip()
        if not info and heading.parent is not None:
            info = strip_label(text_of(heading.parent))
        if info:
            return info

    return _regex_value(_LINE_RE, text_of(section))


def any_heading(doc: BeautifulSoup) -> str | None:
    for heading in doc.select(ANY_HEADING):
        heading_text = text_of(heading)
        if not _is_label(heading_text):
            continue

        section = closest(heading, HEADING_SECTION)
        if section is not None:
            value = text_of(section).replace(heading_text, "", 1).strip()
            if value:
                return value

        sibling = next_element(heading)
        if sibling is not None:
            value = text_of(sibling).strip()
            if value:
                return value
    return None


def global_text(doc: BeautifulSoup) -> str | None:
    return _regex_value(_LINE_RE, text_of(body_of(doc)))


def nutrition_facts(doc: BeautifulSoup) -> str | None:
    block = doc.select_one(NUTRITION_FACTS)
    if block is None:
        return None
    return _regex_value(_LINE_RE, text_of(block))


# Tried in order; the first non-empty result wins.
STRATEGIES: tuple[NamedStrategy, ...] = (
    NamedStrategy("labeled_list_item", labeled_list_item),
    NamedStrategy("labeled_table_row", labeled_table_row),
    NamedStrategy("feature_bullet_text", feature_bullet_text),
    NamedStrategy("labeled_info_section", labeled_info_section),
    NamedStrategy("any_heading", any_heading),
    NamedStrategy("global_text", global_text),
    NamedStrategy("nutrition_facts", nutrition_facts),
)


def run_strategies(
    doc: BeautifulSoup,
    strategies: Sequence[NamedStrategy] = STRATEGIES,
) -> tuple[str, str] | None:
    """Return ``(strategy_name, text)`` for the first strategy that finds anything."""
    for strategy in strategies:
        value = strategy.run(doc)
        if value:
            return strategy.name, value
    return None


def extract_ingredients(
    html: str,
    *,
    parser: DocumentParser = parse_document,
    strategies: Sequence[NamedStrategy] = STRATEGIES,
) -> str:
    """Ingredient text of a product page; raises NoIngredientsFound."""
    hit = run_strategies(parser(html), strategies)
    if hit is None:
        raise NoIngredientsFound()
    return hit[1]


def category_of(doc: BeautifulSoup) -> str | None:
    """Breadcrumb text of a product page, if it has one."""
    crumbs = doc.select_one(BREADCRUMBS)
    return clean_title(text_of(crumbs)) or None


def extract(
    html: str,
    *,
    parser: DocumentParser = parse_document,
    strategies: Sequence[NamedStrategy] = STRATEGIES,
) -> ExtractionOutcome:
    """Per-item extraction outcome; never raises for missing ingredients."""
    doc = parser(html)
    hit = run_strategies(doc, strategies)
    if hit is not None:
        name, text = hit
        logger.debug("EXTRACT strategy=%s chars=%d", name, len(text))
        return ExtractionOutcome(ingredients=text)

    category = category_of(doc) or UNKNOWN_CATEGORY
    return ExtractionOutcome(
        ingredients=NO_INGREDIENTS_TEXT,
        parse_error=(
            "No ingredients section found. This may be a non-food item or the "
            f"ingredients are not listed. Category: {category}"
        ),
    )
