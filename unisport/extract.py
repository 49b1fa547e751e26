"""
Extraction (parsed pages -> course references and session tables).

- extract_index()          index page -> ordered CourseRefs
- retrieve_course_pages()  CourseRefs -> fetched and parsed CoursePages
- drop_free_courses()      removes pages marked as free of charge
- extract_records()        one CoursePage -> one table (one row per session)

Important rules:
- names and links of the index page must pair up 1:1 (hard error otherwise)
- all columns of one course table must have the same length (hard error otherwise)
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd

from unisport.config import ScrapeConfig, Selectors
from unisport.errors import IndexMismatchError, LengthMismatchError, ParseError, PriceFormatError, QueryMismatchError
from unisport.fetch import Fetcher
from unisport.model import COLUMNS, CourseRef, CoursePage
from unisport.tree import Document, parse_html

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Index page
# ---------------------------------------------------------------------------


def extract_index(index: Document, selectors: Selectors) -> List[CourseRef]:
    """
    Read course names and relative links from the index page.

    The anchor selector already excludes the trailing non-course link.
    """
    names = index.texts(selectors.anchor)
    hrefs = index.attributes(selectors.anchor, "href")

    if len(names) != len(hrefs):
        raise IndexMismatchError(index.source or "index", {"names": len(names), "hrefs": len(hrefs)})

    refs = [CourseRef(name=n, href=h.strip()) for n, h in zip(names, hrefs)]

    dupes = sorted(name for name, count in Counter(r.name for r in refs).items() if count > 1)
    if dupes:
        logger.warning("Duplicate course names on index page: %s", ", ".join(dupes))

    return refs


# ---------------------------------------------------------------------------
# Course pages
# ---------------------------------------------------------------------------


def course_urls(refs: Sequence[CourseRef], base_url: str) -> List[str]:
    """
    Absolute course URLs: base URL and href are concatenated as-is.
    """
    return [base_url + ref.href for ref in refs]


def _slug(name: str) -> str:
    slug = re.sub(r"[^\w\-.]+", "_", name, flags=re.UNICODE).strip("_")
    return slug or "course"


def retrieve_course_pages(
    refs: Sequence[CourseRef],
    config: ScrapeConfig,
    fetcher: Fetcher,
    raw_dir: Optional[Path] = None,
    failures: Optional[Dict[str, str]] = None,
) -> List[CoursePage]:
    """
    Fetch and parse every course page.

    Pages that cannot be fetched or parsed are logged, recorded in
    `failures` (course URL -> reason) and skipped.
    If `raw_dir` is given, every fetched page is also written there as
    `<NNN>_<name>.html`, NNN being the 1-based position on the index page.
    """
    urls = course_urls(refs, config.base_url)
    texts = fetcher.fetch_all(urls)

    if raw_dir is not None:
        raw_dir.mkdir(parents=True, exist_ok=True)

    pages: List[CoursePage] = []
    for i, (ref, url, text) in enumerate(zip(refs, urls, texts), start=1):
        if text is None:
            if failures is not None:
                failures[url] = f"{ref.name}: fetch failed"
            continue

        if raw_dir is not None:
            (raw_dir / f"{i:03d}_{_slug(ref.name)}.html").write_text(text, encoding="utf-8")

        try:
            document = parse_html(text, source=url)
        except ParseError as e:
            logger.warning("SKIP  %s (%s)", ref.name, e)
            if failures is not None:
                failures[url] = f"{ref.name}: {e}"
            continue

        pages.append(CoursePage(name=ref.name, url=url, document=document))

    return pages


# ---------------------------------------------------------------------------
# Free courses
# ---------------------------------------------------------------------------


def is_free(page: CoursePage, selectors: Selectors) -> bool:
    marker = page.document.first(selectors.free_marker)
    if marker is None:
        return False
    return True


def drop_free_courses(pages: Sequence[CoursePage], selectors: Selectors) -> List[CoursePage]:
    """
    Remove pages carrying the free-of-charge marker, keeping the order of the rest.
    """
    kept: List[CoursePage] = []
    for page in pages:
        if is_free(page, selectors):
            logger.info("FREE  %s", page.name)
            continue
        kept.append(page)
    return kept


# ---------------------------------------------------------------------------
# Session records (CORE LOGIC)
# ---------------------------------------------------------------------------


def clean_price(text: str, marker: str = "€") -> str:
    """
    Cut a price cell down to the part before the currency marker.

        "24/ 36/ 36/ 56 €24 EUR für Studierende" -> "24/ 36/ 36/ 56"

    Raises PriceFormatError if the marker does not occur.
    """
    idx = text.find(marker)
    if idx < 0:
        raise PriceFormatError(text, marker)
    return text[:idx].rstrip()


def build_table(page: str, course: str, columns: Dict[str, List[str]]) -> pd.DataFrame:
    """
    Assemble one course table from parallel field lists.

    `columns` maps Level/Day/Time/Period/Prices to their values; the course
    name is repeated for every row.
    """
    lengths = {name: len(values) for name, values in columns.items()}
    if len(set(lengths.values())) > 1:
        raise LengthMismatchError(page, lengths)

    n_rows = next(iter(lengths.values()), 0)
    data = {"Course": [course] * n_rows}
    data.update(columns)

    return pd.DataFrame(data, columns=COLUMNS, dtype=object)


def extract_records(page: CoursePage, selectors: Selectors, marker: str = "€") -> pd.DataFrame:
    """
    Extract all sessions of one course page as a table.

    Raises QueryMismatchError if the page has no course head.
    Prices without the currency marker are logged and left empty.
    """
    doc = page.document

    head = doc.first(selectors.head)
    if head is None:
        raise QueryMismatchError(page.name, "head", str(selectors.head))
    course = head.text()

    prices: List[str] = []
    for raw in doc.texts(selectors.price):
        try:
            prices.append(clean_price(raw, marker))
        except PriceFormatError as e:
            logger.warning("%s: %s", page.name, e)
            prices.append("")

    return build_table(
        page.name,
        course,
        {
            "Level": doc.texts(selectors.level),
            "Day": doc.texts(selectors.day),
            "Time": doc.texts(selectors.time),
            "Period": doc.texts(selectors.period),
            "Prices": prices,
        },
    )
