"""Persisted guest preferences."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from reviewbar.config import settings
from reviewbar.review import VISIT_TYPES

logger = logging.getLogger(__name__)


def load_visit_type(path: Path | None = None) -> str | None:
    """Return the stored visit type, or None if nothing usable is stored."""
    path = path or settings.PREFS_PATH
    try:
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as exc:
        logger.warning("Could not read preferences from %s: %s", path, exc)
        return None
    value = data.get("visitType") if isinstance(data, dict) else None
    return value if value in VISIT_TYPES else None


def save_visit_type(visit_type: str, path: Path | None = None) -> None:
    if visit_type not in VISIT_TYPES:
        raise ValueError(f"Unknown visit type: {visit_type}")
    path = path or settings.PREFS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump({"visitType": visit_type}, fh)
