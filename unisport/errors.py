"""
Error types raised while scraping.

Failure classes:
- FetchError          transport failure for one URL (logged, skipped in batches)
- ParseError          a document could not be parsed (logged, page skipped)
- QueryMismatchError  an expected node is absent on a page (logged, page skipped)
- LengthMismatchError columns of one table differ in length (hard error)
"""

from __future__ import annotations

from typing import Dict


class ScrapeError(Exception):
    """Base class for all scraper errors."""


class ConfigError(ScrapeError):
    pass


class FetchError(ScrapeError):
    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"could not fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class ParseError(ScrapeError):
    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"could not parse {source or '<document>'}: {reason}")
        self.source = source
        self.reason = reason


class QueryMismatchError(ScrapeError):
    """
    An expected node or attribute is missing.

    `page` identifies the document (course name or URL), `field` the value
    that was being extracted.
    """

    def __init__(self, page: str, field: str, selector: str = "") -> None:
        msg = f"{page}: no match for {field}"
        if selector:
            msg += f" ({selector})"
        super().__init__(msg)
        self.page = page
        self.field = field
        self.selector = selector


class LengthMismatchError(ScrapeError):
    def __init__(self, page: str, lengths: Dict[str, int]) -> None:
        detail = ", ".join(f"{k}={v}" for k, v in lengths.items())
        super().__init__(f"{page}: column lengths differ ({detail})")
        self.page = page
        self.lengths = dict(lengths)


class IndexMismatchError(LengthMismatchError):
    """Course names and links on the index page do not pair up."""


class PriceFormatError(ScrapeError):
    def __init__(self, text: str, marker: str) -> None:
        super().__init__(f"currency marker {marker!r} not found in {text!r}")
        self.text = text
        self.marker = marker


class SchemaMismatchError(ScrapeError):
    pass
