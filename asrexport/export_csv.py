"""
CSV export for spreadsheet applications.

We convert a list of flat records into a comma-separated text file that opens
cleanly in Excel / LibreOffice / Google Sheets:
- header row = union of all record keys (first-seen order)
- start/end timestamps rendered as 'YYYY-MM-DD HH:MM:SS'
- UTF-8 with a leading BOM so the encoding is auto-detected

The actual write goes through a Sink, so tests can capture the bytes.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, Sequence

from asrexport.model import DATE_COLUMNS
from asrexport.timestamps import format_for_spreadsheet

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "data.csv"
MEDIA_TYPE = "text/csv;charset=utf-8"
BOM = "\ufeff"

_NEEDS_QUOTING = (",", '"', "\n")


class Sink(Protocol):
    """
    Destination for the encoded CSV payload.
    """

    def save(self, data: bytes, filename: str) -> Any: ...


@dataclass
class FileSink:
    """
    Write the payload to <directory>/<filename>.
    """

    directory: Path = field(default_factory=Path.cwd)

    def save(self, data: bytes, filename: str) -> Path:
        out = Path(self.directory) / filename
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(data)
        return out


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(_cell_text(v) for v in value)
    if isinstance(value, Mapping):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def escape_cell(value: Any) -> str:
    """
    Quote a cell if it contains a comma, a quote or a newline ("\\n").
    Inner quotes are doubled.
    """
    text = _cell_text(value)
    if any(ch in text for ch in _NEEDS_QUOTING):
        return '"' + text.replace('"', '""') + '"'
    return text


def format_cell(header: Any, value: Any) -> str:
    if header in DATE_COLUMNS:
        return escape_cell(format_for_spreadsheet(value))
    return escape_cell(value)


def collect_headers(records: Sequence[Any]) -> list[Any]:
    """
    Union of all keys across records, in first-seen order.
    Non-mapping records contribute nothing. Keys are kept as-is, so cells
    are looked up by the same key they were found under.
    """
    # dict keeps insertion order -> ordered set
    seen: dict[Any, None] = {}
    for rec in records:
        if isinstance(rec, Mapping):
            for key in rec:
                seen.setdefault(key, None)
    return list(seen)


def render_csv(records: Sequence[Any]) -> str:
    """
    Build the full CSV text (BOM + header + rows, '\\n' separated).
    Header names are escaped the same way as data cells.
    """
    headers = collect_headers(records)

    lines: list[str] = [",".join(escape_cell(h) for h in headers)]
    for rec in records:
        row = rec if isinstance(rec, Mapping) else {}
        lines.append(",".join(format_cell(h, row.get(h)) for h in headers))

    return BOM + "\n".join(lines)


def export_records_to_csv(
    records: Any,
    filename: str = DEFAULT_FILENAME,
    sink: Sink | None = None,
) -> int:
    """
    Export records to a CSV file. Returns number of exported rows.

    Invalid or empty input is logged and nothing is written (returns 0).
    """
    if not isinstance(records, (list, tuple)) or not records:
        logger.error("Invalid or empty data provided. Please provide a list of records.")
        return 0

    payload = render_csv(records).encode("utf-8")

    target = sink if sink is not None else FileSink()
    target.save(payload, filename or DEFAULT_FILENAME)
    logger.debug("Wrote %d rows (%d bytes, %s) to %s", len(records), len(payload), MEDIA_TYPE, filename)
    return len(records)
