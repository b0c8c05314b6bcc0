from __future__ import annotations

import html
import logging
import re
from collections.abc import Sequence

from .models import MatchOutcome
from .normalize import contains_word, normalize_ingredients, normalize_term, strip_accessibility_label
from .synonyms import DEFAULT_SYNONYMS, SynonymTable

logger = logging.getLogger(__name__)

# Placeholder texts substituted for missing ingredients; never matched against.
FALLBACK_SENTINELS = ("No ingredients found", "Failed to load")
NOT_AVAILABLE = "N/A"

_NO_MATCH = MatchOutcome(found=False, matches=())


def is_placeholder(ingredients: str | None) -> bool:
    if not ingredients:
        return True
    if ingredients == NOT_AVAILABLE:
        return True
    return any(s in ingredients for s in FALLBACK_SENTINELS)


def term_forms(term: str, *, table: SynonymTable = DEFAULT_SYNONYMS) -> tuple[str, ...]:
    """The term itself followed by every variation it should also match as."""
    base = normalize_term(term)
    if not base:
        return ()
    return (base, *(v for v in table.variations(base) if v))


def check_allergies(
    ingredients: str,
    allergies: Sequence[str],
    *,
    table: SynonymTable = DEFAULT_SYNONYMS,
) -> MatchOutcome:
    """Report which of *allergies* occur in *ingredients* as whole words.

    A term also matches through its synonyms. Matches keep the caller's
    original spelling and order.
    """
    if not allergies or is_placeholder(ingredients):
        return _NO_MATCH

    text = normalize_ingredients(ingredients)

    matches: list[str] = []
    for allergy in allergies:
        if not allergy or not allergy.strip():
            continue
        hit = next((form for form in term_forms(allergy, table=table) if contains_word(text, form)), None)
        if hit is not None:
            logger.debug("MATCH allergy=%s via=%s", allergy, hit)
            matches.append(allergy)

    return MatchOutcome(found=bool(matches), matches=tuple(matches))


def highlight_allergies(
    ingredients: str,
    allergies: Sequence[str],
    *,
    table: SynonymTable = DEFAULT_SYNONYMS,
) -> str:
    """Mark up an ingredient list for display.

    Allergen hits are wrapped in ``allergy-highlight`` spans; comma-separated
    pieces without any hit are wrapped in ``safe-ingredient`` spans.
    """
    if not ingredients or not allergies:
        return ingredients

    result = strip_accessibility_label(ingredients)

    terms: list[str] = []
    for allergy in allergies:
        for form in term_forms(allergy, table=table):
            if form not in terms:
                terms.append(form)
    if not terms:
        return result

    # Longer terms first so "mustard seed" wins over "mustard".
    ordered = sorted(terms, key=len, reverse=True)
    pattern = re.compile("(" + "|".join(r"\b" + re.escape(t) + r"\b" for t in ordered) + ")", re.IGNORECASE)

    pieces = []
    for piece in re.split(r",\s*", result):
        piece = html.escape(piece, quote=False)
        if pattern.search(piece):
            pieces.append(pattern.sub(r'<span class="allergy-highlight">\1</span>', piece))
        else:
            pieces.append(f'<span class="safe-ingredient">{piece}</span>')
    return ", ".join(pieces)
