"""
CLI (Command Line Interface).

Quick terminal commands around the two transform stages, e.g.:

    asrexport clean batch1.json batch2.json -o events.json
    asrexport csv batch1.json batch2.json -o events.csv
    asrexport export events.json -o events.csv
    asrexport preview batch1.json

Each batchN.json is one multi-get response copied from the calendar page
(the browser network tab). Several batches are concatenated in the order given.

Note:
- Results are printed as plain text; diagnostics go to stderr via logging
- `preview` renders a rich table
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from asrexport.export_csv import DEFAULT_FILENAME, FileSink, export_records_to_csv
from asrexport.normalize import combine_batches
from asrexport.storage import load_raw_batches, load_records, save_events_json
from asrexport.timestamps import format_for_spreadsheet

PREVIEW_COLUMNS = (
    ("title", "Title"),
    ("status", "Status"),
    ("start_time_utc", "Start (UTC)"),
    ("end_time_utc", "End (UTC)"),
    ("location", "Location"),
    ("teacher_count", "Teachers"),
    ("attendance_yes_count", "Attended"),
)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _load_events(paths: list[str]) -> list[dict[str, Any]]:
    return combine_batches(load_raw_batches(paths))


def _write_csv(records: list[Any], out: str) -> int:
    """
    Export records to `out`. Returns process exit code.
    """
    out_path = Path(out or DEFAULT_FILENAME)
    try:
        n = export_records_to_csv(records, out_path.name, sink=FileSink(out_path.parent))
    except OSError as exc:
        print(f"Could not write {out_path}: {exc}")
        return 1

    if n == 0:
        print("Nothing to export.")
        return 1

    print(f"Exported {n} rows to: {out_path}")
    return 0


def _cmd_clean(args: argparse.Namespace) -> int:
    """
    Normalize raw batches and save them as one events JSON file.
    """
    events = _load_events(args.batches)
    if not events:
        print("No events found.")
        return 1

    try:
        out_path = save_events_json(events, args.out)
    except OSError as exc:
        print(f"Could not write {args.out}: {exc}")
        return 1

    print(f"Saved {len(events)} events to: {out_path}")
    return 0


def _cmd_csv(args: argparse.Namespace) -> int:
    """
    Normalize raw batches and export them straight to CSV.
    """
    events = _load_events(args.batches)
    if not events:
        print("No events found.")
        return 1
    return _write_csv(events, args.out)


def _cmd_export(args: argparse.Namespace) -> int:
    """
    Export an already flat JSON file (list or {"events": [...]}) to CSV.
    """
    records = load_records(args.records)
    return _write_csv(records, args.out)


def _cmd_preview(args: argparse.Namespace) -> int:
    """
    Show normalized events as a table in the terminal.
    """
    events = _load_events(args.batches)
    if not events:
        print("No events found.")
        return 1

    limit = max(args.limit, 1)
    shown = events[:limit]

    table = Table(title=f"Events ({len(shown)} of {len(events)})", box=box.SIMPLE)
    table.add_column("#", justify="right")
    for _, label in PREVIEW_COLUMNS:
        table.add_column(label)

    for i, ev in enumerate(shown, start=1):
        cells = []
        for key, _ in PREVIEW_COLUMNS:
            value = ev.get(key)
            if key in ("start_time_utc", "end_time_utc"):
                value = format_for_spreadsheet(value)
            cells.append(escape("" if value is None else str(value)))
        table.add_row(str(i), *cells)

    Console().print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="asrexport", description="Calendar event cleaner + CSV exporter")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug diagnostics")
    sub = parser.add_subparsers(dest="command", required=True)

    p_clean = sub.add_parser("clean", help="Normalize raw batches into an events JSON file")
    p_clean.add_argument("batches", nargs="+", help="Raw response JSON files (in order)")
    p_clean.add_argument("-o", "--out", type=str, default="events.json", help="Output JSON path")

    p_csv = sub.add_parser("csv", help="Normalize raw batches and export to CSV")
    p_csv.add_argument("batches", nargs="+", help="Raw response JSON files (in order)")
    p_csv.add_argument("-o", "--out", type=str, default=DEFAULT_FILENAME, help="Output CSV path")

    p_export = sub.add_parser("export", help="Export flat records JSON to CSV")
    p_export.add_argument("records", type=str, help="JSON list or {\"events\": [...]} file")
    p_export.add_argument("-o", "--out", type=str, default=DEFAULT_FILENAME, help="Output CSV path")

    p_preview = sub.add_parser("preview", help="Show normalized events in the terminal")
    p_preview.add_argument("batches", nargs="+", help="Raw response JSON files (in order)")
    p_preview.add_argument("--limit", type=int, default=20, help="Max rows to show")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.command == "clean":
        raise SystemExit(_cmd_clean(args))
    if args.command == "csv":
        raise SystemExit(_cmd_csv(args))
    if args.command == "export":
        raise SystemExit(_cmd_export(args))
    if args.command == "preview":
        raise SystemExit(_cmd_preview(args))

    raise SystemExit(2)
