"""
Tests for the CLI entry point.

These tests focus on:
- offline commands (extract, show) on temporary files
- scrape writing its exports (pipeline mocked, no network)
- exit codes for bad input
"""

import contextlib
import io
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from html_fixtures import BADMINTON_HTML
from unisport.cli import main
from unisport.dataset import concat_tables
from unisport.extract import build_table
from unisport.model import CourseRef
from unisport.pipeline import PipelineResult


def _run(argv: list) -> tuple:
    out = io.StringIO()
    with contextlib.redirect_stdout(out):
        try:
            main(argv)
        except SystemExit as e:
            return e.code, out.getvalue()
    raise AssertionError("main() did not exit")


class TestCLI(unittest.TestCase):
    def test_command_is_required(self) -> None:
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main([])
        self.assertNotEqual(ctx.exception.code, 0)

    def test_extract_prints_rows(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "badminton.html"
            p.write_text(BADMINTON_HTML, encoding="utf-8")
            code, out = _run(["extract", str(p)])

        self.assertEqual(code, 0)
        lines = out.strip().splitlines()
        self.assertEqual(len(lines), 2)
        self.assertEqual(lines[0], "Badminton | Anfänger | Mo | 18:00-19:30 | 14.10.-03.02. | 24/ 36/ 36/ 56")

    def test_extract_missing_file(self) -> None:
        code, out = _run(["extract", "/nonexistent/page.html"])
        self.assertEqual(code, 1)
        self.assertIn("Cannot read", out)

    def test_extract_empty_file_is_error(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "empty.html"
            p.write_text("", encoding="utf-8")
            code, out = _run(["extract", str(p)])
        self.assertEqual(code, 1)
        self.assertIn("Error:", out)

    def test_scrape_writes_csv_and_show_reads_it(self) -> None:
        table = build_table(
            "Yoga",
            "Yoga",
            {"Level": ["alle"], "Day": ["Di"], "Time": ["8-9"], "Period": ["x"], "Prices": ["20/ 30"]},
        )
        result = PipelineResult(
            dataset=concat_tables([table]),
            courses=[CourseRef("Yoga", "_Yoga.html"), CourseRef("Lauftreff", "_Lauftreff.html")],
            free=["Lauftreff"],
        )

        with tempfile.TemporaryDirectory() as d:
            csv_path = Path(d) / "courses.csv"
            with mock.patch("unisport.cli.run_pipeline", return_value=result) as run:
                code, out = _run(["scrape", "--csv", str(csv_path), "--index-url", "https://s.test/k/"])

            self.assertEqual(code, 0)
            self.assertEqual(run.call_args.args[0].base_url, "https://s.test/k/")
            self.assertTrue(csv_path.exists())
            self.assertIn("Rows: 1", out)

            code, out = _run(["show", str(csv_path)])
            self.assertEqual(code, 0)
            self.assertIn("Yoga | alle | Di | 8-9 | x | 20/ 30", out)

    def test_show_corrupt_pickle(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "courses.pkl"
            p.write_bytes(b"not a pickle")
            code, out = _run(["show", str(p)])
        self.assertEqual(code, 1)
        self.assertIn("Cannot read", out)

    def test_show_csv_without_course_column(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "other.csv"
            p.write_text("Name,Day\nYoga,Di\n", encoding="utf-8")
            code, out = _run(["show", str(p)])
        self.assertEqual(code, 1)
        self.assertIn("Error:", out)
        self.assertIn("Course", out)


if __name__ == "__main__":
    unittest.main()
