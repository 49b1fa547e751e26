"""
Parsing (HTML -> queryable tree).

parse_html() parses with BeautifulSoup's lenient "html.parser" builder, so
real-world markup (unclosed tags, stray entities) is accepted, and converts
the result into an lxml.html tree via lxml's soupparser. Selectors are
evaluated as XPath by lxml. The resulting Document and its Nodes expose a
small typed interface used by the extractors instead of raw lxml elements.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, List, Optional

from bs4 import BeautifulSoup, ParserRejectedMarkup
from lxml.html import soupparser

from unisport.errors import ParseError
from unisport.query import Selector


class Node:
    """
    Read-only view on one element of a parsed document.
    """

    __slots__ = ("_el", "_document")

    def __init__(self, el: Any, document: "Document") -> None:
        self._el = el
        self._document = document

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Node) and other._el is self._el

    def __hash__(self) -> int:
        return id(self._el)

    def __repr__(self) -> str:
        return f"<Node {self.name}>"

    @property
    def name(self) -> str:
        return self._el.tag

    @property
    def document(self) -> "Document":
        return self._document

    def children(self) -> List["Node"]:
        # skip comments and processing instructions
        return [Node(c, self._document) for c in self._el if isinstance(c.tag, str)]

    def attribute(self, name: str) -> Optional[str]:
        return self._el.get(name)

    def text(self) -> str:
        return self._el.text_content().strip()

    def query(self, selector: Selector) -> List["Node"]:
        """
        Matches of `selector` in document order; no match is an empty list.
        """
        return [Node(el, self._document) for el in self._el.xpath(selector.xpath)]

    def first(self, selector: Selector) -> Optional["Node"]:
        found = self.query(selector)
        if not found:
            return None
        return found[0]

    def texts(self, selector: Selector) -> List[str]:
        return [n.text() for n in self.query(selector)]

    def attributes(self, selector: Selector, name: str) -> List[str]:
        """
        Values of attribute `name` on every match that carries it.
        """
        out: List[str] = []
        for n in self.query(selector):
            value = n.attribute(name)
            if value is not None:
                out.append(value)
        return out


class Document(Node):
    """
    Root of a parsed HTML page.
    """

    __slots__ = ("source",)

    def __init__(self, root: Any, source: str = "") -> None:
        super().__init__(root, self)
        self.source = source

    def __repr__(self) -> str:
        return f"<Document {self.source or '?'}>"

    @property
    def name(self) -> str:
        return "[document]"

    def query(self, selector: Selector) -> List[Node]:
        # from the document node, relative and absolute paths coincide
        return super().query(replace(selector, absolute=True))

    def children(self) -> List[Node]:
        return [Node(self._el, self)]


def parse_html(text: str, source: str = "") -> Document:
    """
    Parse raw HTML into a Document.

    Raises ParseError for blank input, markup without any element,
    or markup BeautifulSoup refuses.
    """
    if not isinstance(text, str) or not text.strip():
        raise ParseError(source, "empty document")

    def make_soup(markup: str, **bsargs: Any) -> BeautifulSoup:
        # plain string attributes, class="a b" stays one value
        soup = BeautifulSoup(markup, "html.parser", multi_valued_attributes=None)
        if soup.find(True) is None:
            raise ParseError(source, "no HTML elements found")
        return soup

    try:
        root = soupparser.fromstring(text, beautifulsoup=make_soup)
    except ParserRejectedMarkup as e:
        raise ParseError(source, str(e)) from e

    return Document(root, source=source)
