"""
Tests for CLI entry points.

These tests run the sub-commands end-to-end on temporary files
(so no real data in the working directory is touched).
"""

import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path

from asrexport.cli import main

BATCH_1 = {
    "docs": [
        {
            "_source": {
                "event_title_text": "Anatomy, Lecture 1",
                "event_status_text": "Published",
                "year_option_year": "2023_2024",
                "strat_date_and_time_date": "2024-01-15T10:00:00.000Z",
                "teachers_list_user": ["u1", "u2"],
            }
        },
        {"_source": {"event_title_text": "Old", "event_status_text": "Archived"}},
        None,
    ]
}
BATCH_2 = {"docs": [{"_source": {"event_title_text": "Physiology", "site_option_sites": "North"}}]}


def _run(argv: list[str]) -> tuple[int, str]:
    out = io.StringIO()
    try:
        with contextlib.redirect_stdout(out):
            main(argv)
    except SystemExit as exc:
        return exc.code, out.getvalue()
    raise AssertionError("main() did not exit")


class TestCLI(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.b1 = self.dir / "batch1.json"
        self.b2 = self.dir / "batch2.json"
        self.b1.write_text(json.dumps(BATCH_1), encoding="utf-8")
        self.b2.write_text(json.dumps(BATCH_2), encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_clean_writes_events_json(self) -> None:
        out = self.dir / "events.json"
        code, text = _run(["clean", str(self.b1), str(self.b2), "-o", str(out)])

        self.assertEqual(code, 0)
        self.assertIn("Saved 2 events", text)
        data = json.loads(out.read_text(encoding="utf-8"))
        self.assertEqual([e["title"] for e in data["events"]], ["Anatomy, Lecture 1", "Physiology"])
        self.assertEqual(data["events"][0]["year"], "20232024")
        self.assertEqual(data["events"][0]["teacher_count"], 2)

    def test_csv_exports_combined_batches(self) -> None:
        out = self.dir / "events.csv"
        code, _ = _run(["csv", str(self.b1), str(self.b2), "-o", str(out)])

        self.assertEqual(code, 0)
        lines = out.read_bytes().decode("utf-8-sig").split("\n")
        self.assertEqual(lines[0], "title,status,year,start_time_utc,teacher_count,site")
        self.assertEqual(lines[1], '"Anatomy, Lecture 1",Published,20232024,2024-01-15 10:00:00,2,')
        self.assertEqual(lines[2], "Physiology,,,,,North")

    def test_export_flat_records(self) -> None:
        records = self.dir / "records.json"
        records.write_text(json.dumps([{"a": 1, "b": 2}, {"b": 3, "c": 4}]), encoding="utf-8")
        out = self.dir / "flat.csv"

        code, text = _run(["export", str(records), "-o", str(out)])

        self.assertEqual(code, 0)
        self.assertIn("Exported 2 rows", text)
        self.assertEqual(out.read_bytes(), "\ufeffa,b,c\n1,2,\n,3,4".encode("utf-8"))

    def test_export_empty_records_fails_without_file(self) -> None:
        records = self.dir / "empty.json"
        records.write_text("[]", encoding="utf-8")
        out = self.dir / "empty.csv"

        code, _ = _run(["export", str(records), "-o", str(out)])

        self.assertNotEqual(code, 0)
        self.assertFalse(out.exists())

    def test_csv_without_events_fails(self) -> None:
        empty = self.dir / "none.json"
        empty.write_text(json.dumps({"docs": []}), encoding="utf-8")
        code, text = _run(["csv", str(empty), "-o", str(self.dir / "x.csv")])

        self.assertEqual(code, 1)
        self.assertIn("No events found.", text)

    def test_preview_lists_titles(self) -> None:
        code, text = _run(["preview", str(self.b2)])
        self.assertEqual(code, 0)
        self.assertIn("Events (1 of 1)", text)

    def test_missing_subcommand_exits_nonzero(self) -> None:
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main([])
        self.assertNotEqual(ctx.exception.code, 0)


if __name__ == "__main__":
    unittest.main()
