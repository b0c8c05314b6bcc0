from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType


# Canonical allergen -> derivative / related terms found on ingredient labels.
_DEFAULT_ENTRIES: dict[str, tuple[str, ...]] = {
    "milk": ("dairy", "lactose", "whey", "casein", "butter", "cream", "cheese"),
    "egg": ("eggs", "albumin", "ovalbumin", "lysozyme", "globulin"),
    "peanut": ("peanuts", "arachis", "goober", "groundnut"),
    "tree nut": ("almond", "hazelnut", "walnut", "cashew", "pistachio", "pecan", "macadamia"),
    "soy": ("soya", "soybean", "edamame", "tofu", "tempeh", "miso"),
    "wheat": ("gluten", "flour", "bread", "cereal", "pasta", "bran", "starch"),
    "fish": ("cod", "salmon", "tuna", "tilapia", "halibut", "anchovy", "mahi"),
    "shellfish": ("shrimp", "crab", "lobster", "prawn", "crayfish", "clam", "mussel", "oyster"),
    "sesame": ("tahini", "benne", "gingelly"),
    "mustard": ("mustard seed", "mustard powder", "dijon"),
    "celery": ("celeriac", "celery seed", "celery salt"),
    "lupin": ("lupine", "lupin flour", "lupin bean"),
    "sulfite": ("sulphite", "sulfur dioxide", "e220", "preservative"),
}


class SynonymTable:
    """Read-only canonical -> variations mapping.

    Lookups work both ways: a variation resolves to its canonical term plus
    the other variations of the same entry. Nothing mutates the table after
    construction, so one instance is shared by every concurrent match.
    """

    def __init__(self, entries: Mapping[str, tuple[str, ...] | list[str]]):
        frozen = {k.strip().lower(): tuple(v.strip().lower() for v in vals) for k, vals in entries.items()}
        self._entries: Mapping[str, tuple[str, ...]] = MappingProxyType(frozen)

    @property
    def entries(self) -> Mapping[str, tuple[str, ...]]:
        return self._entries

    def __contains__(self, term: object) -> bool:
        return self.lookup(str(term)) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, term: str) -> tuple[str, ...] | None:
        """Related forms of *term*, or None if it has no entry."""
        term = term.strip().lower()
        for canonical, variations in self._entries.items():
            if term == canonical or term in variations:
                return tuple(v for v in (canonical, *variations) if v != term)
        return None

    def variations(self, term: str) -> tuple[str, ...]:
        """Related forms of *term*, with a singular/plural toggle for unmapped terms."""
        term = term.strip().lower()
        related = self.lookup(term)
        if related is not None:
            return related
        if term.endswith("s"):
            return (term[:-1],)
        return (term + "s",)


DEFAULT_SYNONYMS = SynonymTable(_DEFAULT_ENTRIES)
