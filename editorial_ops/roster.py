from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from thefuzz import fuzz

from .logging_setup import get_logger, with_extras
from .runtime_config import RUNTIME_CONFIG

logger = get_logger(__name__)

ROSTER_FIELDS = ("name", "initials", "email", "github")
# rosters name the handle column differently; the first one present is used
HANDLE_COLUMNS = ("github", "github_handle", "handle")
# identity fields tried in this order; the first field with a hit wins
MATCH_PRIORITY = ("initials", "name", "github", "email")


def _info(msg: str, **extras: Any) -> None:
    if extras:
        with_extras(logger, **extras).info(msg)
    else:
        logger.info(msg)


def load_roster(path: Optional[Union[str, Path]] = None) -> List[Dict[str, str]]:
    """Read the AE roster CSV. Read fresh on every call.

    The handle column may be called ``github``, ``github_handle`` or
    ``handle``; it is always exposed as ``github``.
    """
    path = Path(path or RUNTIME_CONFIG.paths.roster_csv)
    rows: List[Dict[str, str]] = []
    with open(path, "r", encoding="utf-8-sig", newline="") as fh:
        reader = csv.DictReader(fh)
        header = [h.strip() for h in (reader.fieldnames or [])]
        handle_col = next((c for c in HANDLE_COLUMNS if c in header), None)
        for raw in reader:
            raw = {(k or "").strip(): v for k, v in raw.items()}
            row = {k: (raw.get(k) or "").strip() for k in ROSTER_FIELDS if k != "github"}
            row["github"] = (raw.get(handle_col) or "").strip() if handle_col else ""
            rows.append(row)
    return rows


def resolve_initials(initials: str, roster: List[Dict[str, str]]) -> Optional[str]:
    for entry in roster:
        if entry["initials"] == initials:
            return entry["name"]
    return None


def find_by_name(name: str, roster: List[Dict[str, str]]) -> Optional[Dict[str, str]]:
    for entry in roster:
        if entry["name"] == name:
            return entry
    return None


def match_ae(roster: List[Dict[str, str]], identifier: str) -> Optional[Dict[str, str]]:
    """Find the roster entry an identifier refers to.

    The identifier may be the whole or part of an AE's initials, name, github
    handle or email; matching is a case-insensitive substring test. Fields are
    tried in ``MATCH_PRIORITY`` order, so an identifier that hits one entry's
    initials and another entry's name resolves to the initials hit. Several
    hits within the same field go to the closest string by fuzzy ratio,
    roster order breaking ties.
    """
    needle = (identifier or "").strip().lower()
    if not needle:
        return None
    for field in MATCH_PRIORITY:
        hits = [e for e in roster if e.get(field) and needle in e[field].lower()]
        if not hits:
            continue
        if len(hits) == 1:
            return hits[0]
        best = max(hits, key=lambda e: fuzz.ratio(needle, e[field].lower()))
        _info(
            "Identifier matched several AEs; picked closest",
            identifier=identifier,
            field=field,
            candidates=[e["name"] for e in hits],
            picked=best["name"],
        )
        return best
    return None
