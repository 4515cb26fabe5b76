"""
Normalization (raw multi-get response -> flat event records).

- Renames the verbose backend field names to short canonical names
- Converts the start/end timestamps to ISO 8601 UTC strings
- Replaces participant ID lists with their counts
- Drops archived events and events without a title

Important rules:
- Never raises on malformed input; bad documents are skipped
- Absent source fields never appear in the output (no defaults)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Iterable, Optional

from asrexport.model import (
    ARCHIVED_STATUS,
    COUNT_FIELDS,
    DOCS_KEY,
    EVENTS_KEY,
    FIELD_MAP,
    SOURCE_KEY,
    TIMESTAMP_FIELDS,
    Record,
)
from asrexport.timestamps import parse_timestamp, to_iso_utc

logger = logging.getLogger(__name__)


def _rename_fields(source: Mapping[str, Any], event: Record) -> None:
    for original_key, new_key in FIELD_MAP.items():
        value = source.get(original_key)
        if value is None:
            continue
        # "2023_2024" -> "20232024"
        if new_key == "year" and isinstance(value, str):
            value = value.replace("_", "")
        event[new_key] = value


def _convert_timestamps(source: Mapping[str, Any], event: Record) -> None:
    for original_key, new_key in TIMESTAMP_FIELDS.items():
        raw = source.get(original_key)
        if not raw:
            continue
        dt = parse_timestamp(raw)
        if dt is None:
            logger.warning("Unparseable timestamp in %s: %r (field omitted)", original_key, raw)
            continue
        event[new_key] = to_iso_utc(dt)


def _count_lists(source: Mapping[str, Any], event: Record) -> None:
    for original_key, new_key in COUNT_FIELDS.items():
        value = source.get(original_key)
        if isinstance(value, (list, tuple)):
            event[new_key] = len(value)


def normalize_document(doc: Any) -> Optional[Record]:
    """
    Build one flat event from one raw document.

    Returns None if the document (or its '_source') is missing or malformed.
    """
    if not isinstance(doc, Mapping):
        return None

    source = doc.get(SOURCE_KEY)
    if not source or not isinstance(source, Mapping):
        return None

    event: Record = {}
    _rename_fields(source, event)
    _convert_timestamps(source, event)
    _count_lists(source, event)
    return event


def is_retained(event: Optional[Record]) -> bool:
    """
    Keep only real events: not archived and with a title.
    """
    if not event:
        return False
    if event.get("status") == ARCHIVED_STATUS:
        return False
    return bool(event.get("title"))


def normalize(raw_batch: Any) -> dict[str, list[Record]]:
    """
    Normalize one multi-get response body.

    Always returns {"events": [...]}, even for invalid input.
    """
    docs = raw_batch.get(DOCS_KEY) if isinstance(raw_batch, Mapping) else None
    if not isinstance(docs, (list, tuple)):
        logger.error("Invalid input data structure. Expected an object with a 'docs' array.")
        return {EVENTS_KEY: []}

    events: list[Record] = []
    for i, doc in enumerate(docs):
        event = normalize_document(doc)
        if event is None:
            logger.debug("Skipping document %d: missing or malformed '%s'", i, SOURCE_KEY)
            continue
        if is_retained(event):
            events.append(event)

    return {EVENTS_KEY: events}


def combine_batches(raw_batches: Iterable[Any]) -> list[Record]:
    """
    Normalize several responses and concatenate their events.

    Batch order and the order inside each batch are preserved.
    """
    out: list[Record] = []
    for batch in raw_batches:
        out.extend(normalize(batch)[EVENTS_KEY])
    return out
