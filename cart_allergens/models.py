from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CartItemRef:
    """One located product in the cart view."""

    url: str
    title: str


@dataclass(frozen=True)
class FetchOutcome:
    item: CartItemRef
    html: str | None = None
    fetch_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.fetch_error is None


@dataclass(frozen=True)
class ExtractionOutcome:
    ingredients: str

    # Set when every strategy came up empty; ingredients then holds fallback text.
    parse_error: str | None = None


@dataclass(frozen=True)
class MatchOutcome:
    found: bool
    matches: tuple[str, ...] = ()


@dataclass(frozen=True)
class ScrapeResult:
    url: str
    title: str
    ingredients: str
    error: str | None = None

    # Only set when error is None.
    allergy_found: bool | None = None
    allergy_matches: tuple[str, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Wire form: camelCase keys, optional fields omitted when absent."""
        out: dict[str, Any] = {
            "url": self.url,
            "title": self.title,
            "ingredients": self.ingredients,
        }
        if self.error is not None:
            out["error"] = self.error
        if self.allergy_found is not None:
            out["allergyFound"] = self.allergy_found
        if self.allergy_matches is not None:
            out["allergyMatches"] = list(self.allergy_matches)
        return out


@dataclass(frozen=True)
class CartPage:
    """A snapshot of the host cart document."""

    html: str
    url: str
    cookies: dict[str, str] = field(default_factory=dict)
