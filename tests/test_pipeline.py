"""
End-to-end tests of the scrape pipeline against fixture pages.

Index page: 5 menu anchors (the last is not a course), 4 course pages,
one of them free of charge.
"""

import tempfile
import unittest
from pathlib import Path

from html_fixtures import BASE_URL, INDEX_HTML, INDEX_URL, PAGES, FakeFetcher, course_page
from unisport.config import ScrapeConfig
from unisport.errors import FetchError, LengthMismatchError
from unisport.model import COLUMNS
from unisport.pipeline import run_pipeline

CONFIG = ScrapeConfig(index_url=INDEX_URL, max_workers=1)


def _all_pages() -> dict:
    pages = dict(PAGES)
    pages[INDEX_URL] = INDEX_HTML
    return pages


class TestPipeline(unittest.TestCase):
    def test_end_to_end(self) -> None:
        fetcher = FakeFetcher(_all_pages(), CONFIG)
        result = run_pipeline(CONFIG, fetcher=fetcher)
        df = result.dataset

        self.assertEqual(list(df.columns), COLUMNS)
        self.assertEqual(set(df.columns), {"Course", "Level", "Day", "Time", "Period", "Prices"})
        # Badminton (2) + Yoga (3) + Schwimmen (1); Lauftreff is free
        self.assertEqual(list(df["Course"]), ["Badminton"] * 2 + ["Yoga"] * 3 + ["Schwimmen"])
        self.assertNotIn("Lauftreff", set(df["Course"]))
        self.assertEqual(result.free, ["Lauftreff"])
        self.assertEqual(result.failures, {})
        self.assertEqual([r.name for r in result.courses], ["Badminton", "Yoga", "Lauftreff", "Schwimmen"])

        # the trailing menu link is never requested
        self.assertNotIn(BASE_URL + "kursleitung.html", fetcher.requested)
        self.assertEqual(fetcher.requested[0], INDEX_URL)

    def test_failed_and_broken_pages_are_reported(self) -> None:
        pages = _all_pages()
        del pages[BASE_URL + "_Yoga.html"]
        pages[BASE_URL + "_Schwimmen.html"] = "<html><body><p>Seite nicht gefunden</p></body></html>"

        result = run_pipeline(CONFIG, fetcher=FakeFetcher(pages, CONFIG))

        self.assertEqual(list(result.dataset["Course"]), ["Badminton", "Badminton"])
        self.assertEqual(sorted(result.failures), [BASE_URL + "_Schwimmen.html", BASE_URL + "_Yoga.html"])
        self.assertIn("head", result.failures[BASE_URL + "_Schwimmen.html"])

    def test_index_failure_is_fatal(self) -> None:
        with self.assertRaises(FetchError):
            run_pipeline(CONFIG, fetcher=FakeFetcher(dict(PAGES), CONFIG))

    def test_length_mismatch_propagates(self) -> None:
        pages = _all_pages()
        broken = course_page("Yoga", [("A", "Mo", "8-9", "x", "5 €"), ("B", "Di", "8-9", "x", "5 €")])
        pages[BASE_URL + "_Yoga.html"] = broken.replace('<td class="bs_szeit">8-9</td>', "", 1)

        with self.assertRaises(LengthMismatchError):
            run_pipeline(CONFIG, fetcher=FakeFetcher(pages, CONFIG))

    def test_raw_dir_receives_course_pages(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            raw = Path(d)
            run_pipeline(CONFIG, fetcher=FakeFetcher(_all_pages(), CONFIG), raw_dir=raw)
            self.assertEqual(
                sorted(p.name for p in raw.glob("*.html")),
                ["001_Badminton.html", "002_Yoga.html", "003_Lauftreff.html", "004_Schwimmen.html"],
            )


if __name__ == "__main__":
    unittest.main()
