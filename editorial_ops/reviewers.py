from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional

from .logging_setup import get_logger, with_extras
from .runtime_config import RUNTIME_CONFIG
from .sheets import SheetsClient, a1_range, read_table

logger = get_logger(__name__)

_OUTCOMES = ("Agreed", "Declined")


def _info(msg: str, **extras: Any) -> None:
    if extras:
        with_extras(logger, **extras).info(msg)
    else:
        logger.info(msg)


def classify_fragment(fragment: str) -> Optional[str]:
    """Return ``"agreed"``/``"declined"`` for the keyword occurring first, else None."""
    positions = [(fragment.find(k), k) for k in _OUTCOMES if k in fragment]
    if not positions:
        return None
    return min(positions)[1].lower()


def reviewer_outcomes(articles: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    """One row per agree/decline fragment: ``{"id", "name", "outcome"}``."""
    rows: List[Dict[str, str]] = []
    for article in articles:
        for reviewer in article.get("reviewers") or []:
            for fragment in (reviewer.get("comment") or "").split(";"):
                outcome = classify_fragment(fragment.strip())
                if outcome:
                    rows.append({"id": article.get("id"), "name": reviewer.get("name"), "outcome": outcome})
    return rows


def format_percent(ratio: float) -> str:
    return f"{ratio:.0%}"


def reviewer_summary(
    articles: Iterable[Dict[str, Any]],
    push: bool = False,
    client: Optional[SheetsClient] = None,
) -> List[Dict[str, Any]]:
    """Agree/decline counts and agree ratio per reviewer, from past invites.

    With ``push=True`` the agreed counts are also written to the reviewer
    sheet, one cell per sheet row (see ``push_agreed_counts``).
    """
    counts: Dict[str, Dict[str, int]] = defaultdict(lambda: {"agreed": 0, "declined": 0})
    for row in reviewer_outcomes(articles):
        counts[row["name"]][row["outcome"]] += 1

    res = []
    for name in sorted(counts):
        agreed = counts[name]["agreed"]
        declined = counts[name]["declined"]
        res.append(
            {
                "name": name,
                "agreed": agreed,
                "declined": declined,
                "ratio": format_percent(agreed / (agreed + declined)),
            }
        )

    if push:
        push_agreed_counts(res, client=client)
    return res


def push_agreed_counts(summary: List[Dict[str, Any]], client: Optional[SheetsClient] = None) -> str:
    """Write agreed counts into the reviewer sheet column, aligned to the sheet's rows.

    Rows with no summary entry get a blank cell. Returns the A1 range written.
    """
    cfg = RUNTIME_CONFIG.reviewer_sheet
    if not cfg.spreadsheet_id:
        raise RuntimeError("reviewer_sheet.spreadsheet_id is not configured")
    client = client or SheetsClient()

    sheet_rows = read_table(client, cfg.spreadsheet_id, cfg.worksheet)
    agreed_by_name = {row["name"]: row["agreed"] for row in summary}
    values: List[List[Any]] = [["agreed"]]
    matched = 0
    for row in sheet_rows:
        agreed = agreed_by_name.get(str(row.get(cfg.name_column, "")).strip())
        if agreed is not None:
            matched += 1
        values.append(["" if agreed is None else agreed])

    col = cfg.agreed_column
    target = a1_range(cfg.worksheet, f"{col}1:{col}{len(values)}")
    client.write_values(cfg.spreadsheet_id, target, values)
    _info("Pushed reviewer agreed counts", range=target, sheet_rows=len(sheet_rows), matched=matched)
    return target
