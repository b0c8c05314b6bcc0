from __future__ import annotations

import json
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from pathlib import Path

from .models import ScrapeResult


@dataclass
class ItemReport:
    title: str
    url: str
    ingredients: str
    error: str | None
    allergy_matches: list[str]
    status: str  # FLAGGED, CLEAR, FAILED


@dataclass
class RunReport:
    timestamp: str
    allergies: list[str]
    total: int
    succeeded: int
    failed: int
    flagged: int
    items: list[ItemReport]

    def summary_text(self) -> str:
        lines = [
            f"Run: {self.timestamp}  allergies: {', '.join(self.allergies) or '—'}",
            f"Found ingredients for {self.succeeded} of {self.total} products  "
            f"Flagged: {self.flagged}  Failed: {self.failed}",
            "",
        ]
        for i, it in enumerate(self.items, 1):
            lines.append(f"  {i}. [{it.status}] {it.title}")
            if it.status == "FAILED":
                lines.append(f"     ! {it.error}")
            elif it.allergy_matches:
                lines.append(f"     → contains: {', '.join(it.allergy_matches)}")
        return "\n".join(lines)

    def write_json(self, path: str = "artifacts/scan_report.json") -> str:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(asdict(self), indent=2))
        return str(out)


def _status(r: ScrapeResult) -> str:
    if r.error is not None:
        return "FAILED"
    return "FLAGGED" if r.allergy_found else "CLEAR"


def build_report(results: list[ScrapeResult], *, allergies: list[str]) -> RunReport:
    items = [
        ItemReport(
            title=r.title,
            url=r.url,
            ingredients=r.ingredients,
            error=r.error,
            allergy_matches=list(r.allergy_matches or ()),
            status=_status(r),
        )
        for r in results
    ]
    return RunReport(
        timestamp=datetime.now(timezone.utc).isoformat(),
        allergies=list(allergies),
        total=len(items),
        succeeded=sum(1 for i in items if i.status != "FAILED"),
        failed=sum(1 for i in items if i.status == "FAILED"),
        flagged=sum(1 for i in items if i.status == "FLAGGED"),
        items=items,
    )
