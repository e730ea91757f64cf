"""Load and expose display column sets from YAML (with fallbacks)."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from .config import DISPLAY_ORDER_STUDENT, DISPLAY_ORDER_TRIAGE, ISSUE_CORE_COLUMNS

_CACHE: dict[str, list[str]] | None = None


def _fallback_sets() -> dict[str, list[str]]:
    return {
        "core": list(ISSUE_CORE_COLUMNS),
        "triage": list(DISPLAY_ORDER_TRIAGE),
        "student": list(DISPLAY_ORDER_STUDENT),
    }


def load_column_sets(base_path: str | Path | None = None, *, reload: bool = False):
    global _CACHE
    if _CACHE is not None and not reload:
        return _CACHE
    base = Path(base_path or Path(__file__).resolve().parents[2])
    yaml_path = base / "columns.yaml"
    fallback = _fallback_sets()
    if not yaml_path.exists():
        _CACHE = fallback
        return _CACHE
    try:
        data = yaml.safe_load(yaml_path.read_text()) or {}
    except yaml.YAMLError as exc:
        logging.getLogger(__name__).warning("Ignoring unreadable %s: %s", yaml_path, exc)
        _CACHE = fallback
        return _CACHE
    sets = data.get("sets", {}) or {}
    _CACHE = {name: list(sets.get(name) or cols) for name, cols in fallback.items()}
    return _CACHE


def get_columns(set_name: str) -> list[str]:
    sets = load_column_sets()
    return sets.get(set_name, [])
