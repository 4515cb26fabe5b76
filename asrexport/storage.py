"""
Reading and writing the JSON files around the export.

Typical workflow:
- copy each multi-get response from the browser into batch1.json, batch2.json, ...
- normalize them into events.json and/or export straight to CSV

Loading is deliberately defensive: a missing or corrupted file never crashes
the application, it is logged and treated as "no data".
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from asrexport.model import EVENTS_KEY, Record

logger = logging.getLogger(__name__)


def load_json_file(path: str | Path) -> Optional[Any]:
    """
    Load JSON from a file. Returns None if the file is missing or invalid.
    """
    p = Path(path)
    try:
        return json.loads(p.read_text(encoding="utf-8-sig"))
    except FileNotFoundError:
        logger.warning("File not found: %s", p)
        return None
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning("Could not read JSON from %s: %s", p, exc)
        return None


def load_raw_batches(paths: Iterable[str | Path]) -> list[Optional[Any]]:
    """
    Load one raw response per path, keeping the given order.

    Failed loads stay in the list as None so that batch positions are stable;
    the normalizer reports them as invalid input.
    """
    return [load_json_file(p) for p in paths]


def load_records(path: str | Path) -> list[Record]:
    """
    Load flat records for export.

    Accepts a plain JSON list or the normalizer output {"events": [...]}.
    """
    data = load_json_file(path)
    if isinstance(data, dict):
        data = data.get(EVENTS_KEY)
    if not isinstance(data, list):
        return []
    return data


def save_events_json(events: list[Record], path: str | Path) -> Path:
    """
    Save normalized events as {"events": [...]}.

    Creates parent directories if needed.
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    payload = {EVENTS_KEY: list(events)}
    out.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return out
