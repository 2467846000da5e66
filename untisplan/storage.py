"""
Local cache of raw period records.

The file written by `untisplan fetch` looks like:

    {"periods": [ <raw getTimetable records> ]}

Raw records are stored instead of Period objects so the cache keeps
everything WebUntis sent, and parsing rules can change without refetching.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

from untisplan.model import Period, sort_periods


def default_cache_path() -> Path:
    """
    Return the default cache file inside the package.

    A function instead of a constant so tests and config can override it.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "periods.json"


def load_raw_periods(path: str | Path | None = None) -> List[Dict[str, Any]]:
    """
    Load raw period records. A missing file means nothing was fetched yet
    and yields an empty list; a broken file raises ValueError.
    """
    cache_path = Path(path) if path is not None else default_cache_path()
    if not cache_path.exists():
        return []

    try:
        data = json.loads(cache_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValueError(f"Invalid period cache {cache_path}: {e}") from e

    records = data.get("periods") if isinstance(data, dict) else None
    if not isinstance(records, list):
        raise ValueError(f"Invalid period cache {cache_path}: missing 'periods' list")
    return records


def save_raw_periods(records: Iterable[Dict[str, Any]], path: str | Path | None = None) -> int:
    """
    Write raw period records, creating parent directories. Returns the count.
    """
    cache_path = Path(path) if path is not None else default_cache_path()
    cache_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {"periods": list(records)}
    cache_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return len(payload["periods"])


def load_periods(path: str | Path | None = None) -> List[Period]:
    """Load the cache as Period objects in chronological order."""
    return sort_periods(Period.from_raw(r) for r in load_raw_periods(path))
