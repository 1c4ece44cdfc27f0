from __future__ import annotations

import copy
import datetime as dt
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .logging_setup import get_logger, with_extras
from .runtime_config import RUNTIME_CONFIG

logger = get_logger(__name__)

DESCRIPTION = "DESCRIPTION"

_PERSON_RE = re.compile(
    r"^(?P<name>[^<\[]*?)\s*(?:<(?P<email>[^>]*)>)?\s*(?:\[(?P<comment>.*)\])?\s*$"
)
_STATUS_RE = re.compile(
    r"^(?P<date>\S+)\s+(?P<status>[^\[]*?)\s*(?:\[(?P<comments>.*)\])?\s*$"
)
_KNOWN_FIELDS = ("ID", "Title", "Authors", "AE", "Reviewers", "Status")
_SCALAR_FIELDS = {"ID": "id", "Title": "title", "AE": "ae"}
_LIST_FIELDS = {"Authors": "authors", "Reviewers": "reviewers", "Status": "status"}

ArticleLike = Union[Dict[str, Any], str, Path]


def _warn(msg: str, **extras: Any) -> None:
    if extras:
        with_extras(logger, **extras).warning(msg)
    else:
        logger.warning(msg)


# -----------------------
# DESCRIPTION parsing
# -----------------------

def _split_fields(text: str) -> Tuple[List[str], List[Dict[str, Any]]]:
    """Split a DESCRIPTION into fields, keeping each field's raw lines.

    Returns the blank lines before the first field and one dict per field:
    ``key``, stripped value ``lines``, whether the value started on the key
    line (``inline``), the continuation ``indent`` and the ``raw`` lines.
    """
    leading: List[str] = []
    fields: List[Dict[str, Any]] = []
    for raw in text.splitlines(keepends=True):
        if not raw.strip():
            (fields[-1]["raw"] if fields else leading).append(raw)
            continue
        if raw[0].isspace() and fields:
            field = fields[-1]
            field["lines"].append(raw.strip())
            field["raw"].append(raw)
            if field["indent"] is None:
                field["indent"] = raw[: len(raw) - len(raw.lstrip())]
            continue
        key, sep, rest = raw.partition(":")
        if not sep:
            raise ValueError(f"Malformed DESCRIPTION line: {raw!r}")
        fields.append(
            {
                "key": key.strip(),
                "lines": [rest.strip()] if rest.strip() else [],
                "inline": bool(rest.strip()),
                "indent": None,
                "raw": [raw],
            }
        )
    return leading, fields


def parse_person(line: str) -> Dict[str, Optional[str]]:
    """Parse ``Name <email> [comment]``; email and comment are optional."""
    m = _PERSON_RE.match(line.strip())
    if not m:
        return {"name": line.strip(), "email": None, "comment": ""}
    email = (m.group("email") or "").strip() or None
    return {
        "name": m.group("name").strip(),
        "email": email,
        "comment": (m.group("comment") or "").strip(),
    }


def parse_status(line: str) -> Dict[str, Any]:
    m = _STATUS_RE.match(line.strip())
    if not m:
        raise ValueError(f"Malformed status line: {line!r}")
    return {
        "date": dt.date.fromisoformat(m.group("date")),
        "status": m.group("status").strip(),
        "comments": (m.group("comments") or "").strip(),
    }


def _field_value(article: Dict[str, Any], key: str) -> Any:
    if key in _SCALAR_FIELDS:
        return str(article.get(_SCALAR_FIELDS[key]) or "")
    if key in _LIST_FIELDS:
        return list(article.get(_LIST_FIELDS[key]) or [])
    return (article.get("extra") or {}).get(key)


def parse_description(text: str, path: Optional[Path] = None) -> Dict[str, Any]:
    leading, fields = _split_fields(text)
    by_key = {f["key"]: f["lines"] for f in fields}
    authors = []
    for line in by_key.get("Authors", []):
        person = parse_person(line)
        authors.append({"name": person["name"], "email": person["email"]})
    article = {
        "id": " ".join(by_key.get("ID", [])),
        "path": path,
        "title": " ".join(by_key.get("Title", [])),
        "ae": " ".join(by_key.get("AE", [])),
        "authors": authors,
        "reviewers": [parse_person(line) for line in by_key.get("Reviewers", [])],
        "status": [parse_status(line) for line in by_key.get("Status", [])],
        "extra": {k: list(v) for k, v in by_key.items() if k not in _KNOWN_FIELDS},
    }
    # what was read, so a save only rewrites the fields that changed
    article["layout"] = {
        "leading": leading,
        "fields": [
            {
                "key": f["key"],
                "inline": f["inline"],
                "indent": f["indent"],
                "raw": f["raw"],
                "value": copy.deepcopy(_field_value(article, f["key"])),
            }
            for f in fields
        ],
    }
    return article


def _format_person(person: Dict[str, Any]) -> str:
    out = person.get("name") or ""
    if person.get("email"):
        out += f" <{person['email']}>"
    if person.get("comment"):
        out += f" [{person['comment']}]"
    return out


def _format_status(entry: Dict[str, Any]) -> str:
    out = f"{entry['date'].isoformat()} {entry['status']}"
    if entry.get("comments"):
        out += f" [{entry['comments']}]"
    return out


def _field_lines(key: str, value: Any) -> List[str]:
    if key in _SCALAR_FIELDS:
        return [str(value)] if value else []
    if key == "Status":
        return [_format_status(s) for s in value]
    if key in _LIST_FIELDS:
        return [_format_person(p) for p in value]
    return list(value)


def _render_field(key: str, lines: List[str], inline: bool, indent: str = "  ") -> str:
    if not lines:
        return f"{key}:\n"
    if inline:
        return f"{key}: {lines[0]}\n" + "".join(f"{indent}{line}\n" for line in lines[1:])
    return f"{key}:\n" + "".join(f"{indent}{line}\n" for line in lines)


def _emit_field(field: Dict[str, Any], current: Any) -> str:
    key = field["key"]
    if current == field["value"]:
        return "".join(field["raw"])
    indent = field["indent"] or "  "
    original = field["value"]
    if key in _LIST_FIELDS and current[: len(original)] == original:
        # entries were only appended: keep the original lines as they are
        raw = list(field["raw"])
        trailing: List[str] = []
        while raw and not raw[-1].strip():
            trailing.insert(0, raw.pop())
        body = "".join(raw)
        if not body.endswith("\n"):
            body += "\n"
        added = _field_lines(key, current[len(original):])
        return body + "".join(f"{indent}{line}\n" for line in added) + "".join(trailing)
    inline = field["inline"] or key in _SCALAR_FIELDS
    return _render_field(key, _field_lines(key, current), inline, indent)


def _append_part(parts: List[str], text: str) -> None:
    if parts and not parts[-1].endswith("\n"):
        parts[-1] += "\n"
    parts.append(text)


def format_description(article: Dict[str, Any]) -> str:
    """Render an article as DESCRIPTION text.

    Fields read from a file keep their place and their exact lines unless
    their value changed; new fields go after them.
    """
    layout = article.get("layout") or {"leading": [], "fields": []}
    parts: List[str] = list(layout["leading"])
    seen = set()
    for field in layout["fields"]:
        if field["key"] in seen:
            _append_part(parts, "".join(field["raw"]))
            continue
        seen.add(field["key"])
        current = _field_value(article, field["key"])
        if current is None:
            continue
        _append_part(parts, _emit_field(field, current))

    for key in list(_KNOWN_FIELDS) + list(article.get("extra") or {}):
        if key in seen:
            continue
        seen.add(key)
        lines = _field_lines(key, _field_value(article, key))
        if not lines:
            continue
        inline = key in _SCALAR_FIELDS or (key not in _LIST_FIELDS and len(lines) == 1)
        _append_part(parts, _render_field(key, lines, inline))
    return "".join(parts)


# -----------------------
# Filesystem
# -----------------------

def _journal_root(root: Optional[Union[str, Path]] = None) -> Path:
    return Path(root if root is not None else RUNTIME_CONFIG.paths.journal_root)


def _description_path(x: Union[str, Path], root: Optional[Union[str, Path]] = None) -> Path:
    p = Path(x)
    if p.is_file():
        return p
    if p.is_dir():
        return p / DESCRIPTION
    # treat as an id relative to the journal root, e.g. "Submissions/2020-114"
    return _journal_root(root) / p / DESCRIPTION


def load_article(x: Union[str, Path], root: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    path = _description_path(x, root)
    if not path.exists():
        raise FileNotFoundError(f"No {DESCRIPTION} file for article {str(x)!r} ({path})")
    return parse_description(path.read_text(encoding="utf-8"), path=path)


def as_article(x: ArticleLike, root: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    if isinstance(x, dict):
        return x
    return load_article(x, root=root)


def save_article(article: Dict[str, Any]) -> Path:
    path = article.get("path")
    if not path:
        raise ValueError(f"Article {article.get('id')!r} has no DESCRIPTION path to save to")
    path = Path(path)
    path.write_text(format_description(article), encoding="utf-8")
    return path


def update_status(
    article: Dict[str, Any],
    status: str,
    comments: str = "",
    date: Optional[dt.date] = None,
    save: bool = True,
) -> Dict[str, Any]:
    """Append a status event; the article is only changed once the save succeeded."""
    events = list(article.get("status") or [])
    events.append({"date": date or dt.date.today(), "status": status, "comments": comments})
    if save:
        save_article({**article, "status": events})
    article["status"] = events
    return article


def tabulate_articles(
    folders: Optional[Iterable[str]] = None,
    root: Optional[Union[str, Path]] = None,
) -> List[Dict[str, Any]]:
    """Load every article found in the given journal folders, sorted by id."""
    base = _journal_root(root)
    folders = list(folders) if folders is not None else list(RUNTIME_CONFIG.paths.folders)
    out: List[Dict[str, Any]] = []
    for folder in folders:
        folder_path = base / folder
        if not folder_path.is_dir():
            _warn("Article folder missing; skipping", folder=str(folder_path))
            continue
        for child in sorted(folder_path.iterdir()):
            if (child / DESCRIPTION).is_file():
                out.append(load_article(child))
    out.sort(key=lambda a: a["id"])
    return out


def active_articles(root: Optional[Union[str, Path]] = None) -> List[Dict[str, Any]]:
    return tabulate_articles(folders=["Submissions"], root=root)
