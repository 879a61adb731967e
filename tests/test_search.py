"""Tests for one-shot CSV search."""

from __future__ import annotations

import shutil
import tempfile
import unittest
from pathlib import Path

from csvtail.search import search_file


SAMPLE = """id, name, department, status, city
101, Alice Smith, Engineering, Active, London
102, Bob Jones, Sales, Inactive, Berlin
103, Carol White, engineering, Active, Paris
104,Dan Brown,HR,Active,"New York, NY"
"""


class TestSearchFile(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.path = Path(self.tmpdir) / "data.csv"
        self.path.write_text(SAMPLE, encoding="utf-8")

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_case_insensitive_match_in_any_column(self):
        result = search_file(self.path, "ENGINEERING")
        self.assertEqual([r["id"] for r in result.rows], ["101", "103"])

    def test_headers_and_values_are_trimmed(self):
        result = search_file(self.path, "bob")
        self.assertEqual(result.headers, ["id", "name", "department", "status", "city"])
        self.assertEqual(result.rows, [{
            "id": "102",
            "name": "Bob Jones",
            "department": "Sales",
            "status": "Inactive",
            "city": "Berlin",
        }])

    def test_substring_match(self):
        result = search_file(self.path, "act")
        # "Active" and "Inactive"
        self.assertEqual(len(result.rows), 4)

    def test_no_matches(self):
        result = search_file(self.path, "tokyo")
        self.assertEqual(result.rows, [])
        self.assertEqual(len(result.headers), 5)

    def test_empty_term_rejected(self):
        with self.assertRaises(ValueError):
            search_file(self.path, "")

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            search_file(Path(self.tmpdir) / "nope.csv", "x")

    def test_other_delimiter(self):
        self.path.write_text("id;name\n1;Ann\n2;Bob\n", encoding="utf-8")
        result = search_file(self.path, "ann", delimiter=";")
        self.assertEqual(result.rows, [{"id": "1", "name": "Ann"}])


if __name__ == "__main__":
    unittest.main()
