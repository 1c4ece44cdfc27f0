from __future__ import annotations

import datetime as dt
import numbers
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from .articles import ArticleLike, as_article, tabulate_articles, update_status
from .logging_setup import get_logger, with_extras
from .roster import find_by_name, load_roster, match_ae, resolve_initials

logger = get_logger(__name__)

WITH_AE = "with AE"
# AE fields shorter than this hold initials rather than a full name
_INITIALS_MAX_LEN = 3

NO_AE_FOUND = (
    "No AE found. Input the name as the whole or part of the AE name, github handle, or email"
)


def _warn(msg: str, **extras: Any) -> None:
    if extras:
        with_extras(logger, **extras).warning(msg)
    else:
        logger.warning(msg)


def get_ae(article: ArticleLike) -> Dict[str, Any]:
    article = as_article(article)
    return {"id": str(article.get("id")), "ae": article.get("ae")}


def _check_day_back(day_back: Any) -> None:
    if isinstance(day_back, bool) or not isinstance(day_back, numbers.Real):
        raise TypeError(f"day_back must be numeric, got {type(day_back).__name__}")
    if day_back <= 0:
        raise ValueError(f"day_back must be positive, got {day_back}")


def _latest_status(
    events: List[Dict[str, Any]], since: Optional[dt.date]
) -> Optional[Dict[str, Any]]:
    if since is not None:
        events = [e for e in events if e["date"] >= since]
    if not events:
        return None
    # max() keeps the first of equal dates, so reverse to prefer the later file entry
    return max(reversed(events), key=lambda e: e["date"])


def current_assignments(
    articles: Iterable[Dict[str, Any]],
    day_back: Optional[float] = None,
    today: Optional[dt.date] = None,
) -> List[Dict[str, Any]]:
    """Articles whose latest considered status is "with AE" and that have an AE."""
    since = None
    if day_back is not None:
        _check_day_back(day_back)
        since = (today or dt.date.today()) - dt.timedelta(days=day_back)

    out: List[Dict[str, Any]] = []
    seen = set()
    for article in articles:
        ae = (article.get("ae") or "").strip()
        if not ae or article.get("id") in seen:
            continue
        latest = _latest_status(article.get("status") or [], since)
        if latest is None or latest["status"] != WITH_AE:
            continue
        seen.add(article.get("id"))
        out.append({"id": article.get("id"), "ae": ae, "date": latest["date"]})
    return out


def ae_workload(
    articles: Optional[List[Dict[str, Any]]] = None,
    day_back: Optional[float] = None,
    today: Optional[dt.date] = None,
    roster: Optional[List[Dict[str, str]]] = None,
) -> List[Dict[str, Any]]:
    """Count the articles each AE is currently working on.

    Some DESCRIPTION files carry the AE's initials, others the full name;
    initials are resolved to names through the roster before counting.
    ``day_back`` restricts the status history to the last ``day_back`` days.
    """
    roster = roster if roster is not None else load_roster()
    if articles is None:
        articles = tabulate_articles()

    counts: Counter = Counter()
    for row in current_assignments(articles, day_back=day_back, today=today):
        ae = row["ae"]
        if len(ae) <= _INITIALS_MAX_LEN:
            name = resolve_initials(ae, roster)
            if name is None:
                _warn("AE initials not in roster; counting as-is", id=row["id"], ae=ae)
            else:
                ae = name
        counts[ae] += 1

    out = []
    for ae, n in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])):
        entry = find_by_name(ae, roster) or {}
        out.append({"ae": ae, "n": n, "initials": entry.get("initials"), "email": entry.get("email")})
    return out


def add_ae(
    article: ArticleLike,
    name: str,
    date: Optional[dt.date] = None,
    roster: Optional[List[Dict[str, str]]] = None,
) -> Dict[str, Any]:
    """Assign an AE to an article and record a "with AE" status.

    ``name`` can be the whole or part of the AE's initials, name, github
    handle or email. When nothing in the roster matches, a warning is logged
    and the article is returned untouched.
    """
    article = as_article(article)
    roster = roster if roster is not None else load_roster()

    found = match_ae(roster, name)
    if found is None:
        _warn(NO_AE_FOUND, id=article.get("id"), identifier=name)
        return article

    # saved from a copy so a failed write leaves the caller's article as it was
    updated = update_status({**article, "ae": found["initials"]}, WITH_AE, comments=found["name"], date=date)
    article["ae"] = updated["ae"]
    article["status"] = updated["status"]
    with_extras(logger, id=article.get("id"), ae=found["initials"]).info("AE assigned")
    return article
