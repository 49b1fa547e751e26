"""
End-to-end scrape: index page -> course pages -> one dataset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from unisport.config import ScrapeConfig
from unisport.dataset import concat_tables
from unisport.errors import QueryMismatchError
from unisport.extract import drop_free_courses, extract_index, extract_records, retrieve_course_pages
from unisport.fetch import Fetcher
from unisport.model import CourseRef
from unisport.tree import Document, parse_html

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    dataset: pd.DataFrame
    courses: List[CourseRef]
    free: List[str] = field(default_factory=list)
    # course URL -> reason
    failures: Dict[str, str] = field(default_factory=dict)


def load_index(config: ScrapeConfig, fetcher: Fetcher) -> Document:
    """
    Fetch and parse the index page. Errors propagate: without the index
    there is nothing to scrape.
    """
    logger.info("Index: %s", config.index_url)
    return parse_html(fetcher.fetch(config.index_url), source=config.index_url)


def run_pipeline(
    config: ScrapeConfig,
    fetcher: Optional[Fetcher] = None,
    raw_dir: Optional[Path] = None,
) -> PipelineResult:
    fetcher = fetcher if fetcher is not None else Fetcher(config)
    selectors = config.selectors

    index = load_index(config, fetcher)
    refs = extract_index(index, selectors)
    logger.info("Found %d courses", len(refs))

    failures: Dict[str, str] = {}
    pages = retrieve_course_pages(refs, config, fetcher, raw_dir=raw_dir, failures=failures)

    paid = drop_free_courses(pages, selectors)
    paid_ids = {id(p) for p in paid}
    free = [p.name for p in pages if id(p) not in paid_ids]

    tables: List[pd.DataFrame] = []
    for page in paid:
        try:
            tables.append(extract_records(page, selectors, config.currency_marker))
        except QueryMismatchError as e:
            logger.warning("SKIP  %s (%s)", page.name, e)
            failures[page.url] = str(e)

    dataset = concat_tables(tables)
    logger.info(
        "Scraping finished: %d rows from %d courses (%d free, %d failed)",
        len(dataset),
        len(tables),
        len(free),
        len(failures),
    )

    return PipelineResult(dataset=dataset, courses=refs, free=free, failures=failures)
