from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Tuple
import logging
import os
import tomllib

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[1]
_DEFAULT_CONFIG_PATH = REPO_ROOT / "config" / "runtime.toml"


@dataclass(frozen=True)
class PathsConfig:
    journal_root: str
    roster_csv: str
    folders: Tuple[str, ...]


@dataclass(frozen=True)
class ReviewerSheetConfig:
    spreadsheet_id: str
    worksheet: str
    name_column: str
    agreed_column: str


@dataclass(frozen=True)
class RuntimeConfig:
    paths: PathsConfig
    reviewer_sheet: ReviewerSheetConfig


def _default_config() -> RuntimeConfig:
    return RuntimeConfig(
        paths=PathsConfig(
            journal_root=".",
            roster_csv=str(REPO_ROOT / "config" / "associate-editors.csv"),
            folders=("Submissions", "Accepted"),
        ),
        reviewer_sheet=ReviewerSheetConfig(
            spreadsheet_id="",
            worksheet="Sheet1",
            name_column="fname",
            agreed_column="I",
        ),
    )


def _str_field(d: dict, key: str, default: str) -> str:
    val = d.get(key, default)
    if not isinstance(val, str) or not val.strip():
        return default
    return val.strip()


def _folders_field(d: dict, default: Tuple[str, ...]) -> Tuple[str, ...]:
    val = d.get("folders", default)
    if isinstance(val, str):
        val = [val]
    if not isinstance(val, (list, tuple)):
        return default
    cleaned = tuple(str(v).strip() for v in val if str(v).strip())
    return cleaned or default


def _section(raw: Any, name: str) -> dict:
    section = raw.get(name) if isinstance(raw, dict) else {}
    return section if isinstance(section, dict) else {}


def load_runtime_config(config_path: Optional[Path] = None) -> RuntimeConfig:
    cfg = _default_config()
    path = config_path or _DEFAULT_CONFIG_PATH
    raw: Any = {}
    try:
        with path.open("rb") as handle:
            raw = tomllib.load(handle)
    except FileNotFoundError:
        logger.warning("Runtime config file not found; using defaults", extra={"path": str(path)})
    except tomllib.TOMLDecodeError:
        logger.exception("Runtime config parse failed; using defaults", extra={"path": str(path)})

    paths_raw = _section(raw, "paths")
    sheet_raw = _section(raw, "reviewer_sheet")

    journal_root = _str_field(paths_raw, "journal_root", cfg.paths.journal_root)
    roster_csv = _str_field(paths_raw, "roster_csv", cfg.paths.roster_csv)
    if not Path(roster_csv).is_absolute():
        roster_csv = str(REPO_ROOT / roster_csv)

    # environment wins over the file
    journal_root = os.environ.get("EDITORIAL_JOURNAL_ROOT", "").strip() or journal_root
    roster_csv = os.environ.get("EDITORIAL_ROSTER_CSV", "").strip() or roster_csv

    return RuntimeConfig(
        paths=PathsConfig(
            journal_root=journal_root,
            roster_csv=roster_csv,
            folders=_folders_field(paths_raw, cfg.paths.folders),
        ),
        reviewer_sheet=ReviewerSheetConfig(
            spreadsheet_id=_str_field(sheet_raw, "spreadsheet_id", cfg.reviewer_sheet.spreadsheet_id),
            worksheet=_str_field(sheet_raw, "worksheet", cfg.reviewer_sheet.worksheet),
            name_column=_str_field(sheet_raw, "name_column", cfg.reviewer_sheet.name_column),
            agreed_column=_str_field(sheet_raw, "agreed_column", cfg.reviewer_sheet.agreed_column).upper(),
        ),
    )


RUNTIME_CONFIG = load_runtime_config()
