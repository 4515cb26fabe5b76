"""
Unit tests for loading/saving the JSON files.

Storage contract:
- Missing/invalid file -> None (raw) or [] (records), never raises
- Events are saved as {"events": [...]}
"""

import json
import tempfile
import unittest
from pathlib import Path

from asrexport.storage import load_json_file, load_raw_batches, load_records, save_events_json


class TestStorage(unittest.TestCase):
    def test_load_missing_file_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            with self.assertLogs("asrexport.storage", level="WARNING"):
                self.assertIsNone(load_json_file(Path(d) / "missing.json"))

    def test_load_broken_file_returns_none(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "broken.json"
            p.write_text("{not json", encoding="utf-8")
            with self.assertLogs("asrexport.storage", level="WARNING"):
                self.assertIsNone(load_json_file(p))

    def test_load_file_with_bom(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "bom.json"
            p.write_bytes(b"\xef\xbb\xbf" + b'{"docs": []}')
            self.assertEqual(load_json_file(p), {"docs": []})

    def test_raw_batches_keep_order_and_failures(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p1 = Path(d) / "b1.json"
            p2 = Path(d) / "b2.json"
            p1.write_text(json.dumps({"docs": [1]}), encoding="utf-8")
            p2.write_text(json.dumps({"docs": [2]}), encoding="utf-8")
            with self.assertLogs("asrexport.storage", level="WARNING"):
                batches = load_raw_batches([p2, Path(d) / "nope.json", p1])
            self.assertEqual(batches, [{"docs": [2]}, None, {"docs": [1]}])

    def test_save_and_load_events_roundtrip(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "out" / "events.json"
            save_events_json([{"title": "Prüfung"}], p)

            data = json.loads(p.read_text(encoding="utf-8"))
            self.assertEqual(data, {"events": [{"title": "Prüfung"}]})
            self.assertEqual(load_records(p), [{"title": "Prüfung"}])

    def test_load_records_accepts_plain_list(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "records.json"
            p.write_text(json.dumps([{"a": 1}]), encoding="utf-8")
            self.assertEqual(load_records(p), [{"a": 1}])

            p.write_text(json.dumps({"something": "else"}), encoding="utf-8")
            self.assertEqual(load_records(p), [])


if __name__ == "__main__":
    unittest.main()
