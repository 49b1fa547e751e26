"""
Structured node selectors.

A Selector is a typed description of an XPath expression:

    path(descendant("dl", class_="bs_menu"), descendant("a"),
         position=Position.all_but_last())

renders as  (.//dl[@class='bs_menu']//a)[position() < last()]  and is
evaluated by lxml (see unisport.tree).

- Step.axis          CHILD ("/") or DESCENDANT ("//", anywhere beneath)
- Step.attrs         attribute tests, equality or substring
- Step.position      positional predicate among siblings, like td[last()]
- Selector.position  positional predicate over the whole ordered result
- Selector.absolute  evaluate from the document root instead of the context node

Positions are 1-based.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


CHILD = "child"
DESCENDANT = "descendant"


def _literal(value: str) -> str:
    """
    Quote `value` as an XPath string literal.
    """
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{p}'" for p in parts) + ")"


@dataclass(frozen=True)
class Position:
    """
    Positional predicate. `kind` is one of "at", "last", "all_but_last".
    """

    kind: str
    n: int = 0

    @classmethod
    def at(cls, n: int) -> "Position":
        if n < 1:
            raise ValueError(f"positions are 1-based, got {n}")
        return cls("at", n)

    @classmethod
    def first(cls) -> "Position":
        return cls.at(1)

    @classmethod
    def last(cls) -> "Position":
        return cls("last")

    @classmethod
    def all_but_last(cls) -> "Position":
        return cls("all_but_last")

    def __str__(self) -> str:
        if self.kind == "at":
            return f"[{self.n}]"
        if self.kind == "last":
            return "[last()]"
        if self.kind == "all_but_last":
            return "[position() < last()]"
        raise ValueError(f"unknown position kind: {self.kind!r}")


@dataclass(frozen=True)
class AttrTest:
    name: str
    value: str
    contains: bool = False

    def __str__(self) -> str:
        if self.contains:
            return f"[contains(@{self.name}, {_literal(self.value)})]"
        return f"[@{self.name}={_literal(self.value)}]"


@dataclass(frozen=True)
class Step:
    tag: str = "*"
    attrs: Tuple[AttrTest, ...] = ()
    axis: str = DESCENDANT
    position: Optional[Position] = None

    def __str__(self) -> str:
        if self.axis == DESCENDANT:
            sep = "//"
        elif self.axis == CHILD:
            sep = "/"
        else:
            raise ValueError(f"unknown axis: {self.axis!r}")
        preds = "".join(str(t) for t in self.attrs)
        pos = str(self.position) if self.position else ""
        return f"{sep}{self.tag}{preds}{pos}"


@dataclass(frozen=True)
class Selector:
    steps: Tuple[Step, ...]
    absolute: bool = False
    position: Optional[Position] = None

    @property
    def xpath(self) -> str:
        expr = "".join(str(s) for s in self.steps)
        if not self.absolute:
            expr = "." + expr
        if self.position:
            return f"({expr}){self.position}"
        return expr

    def __str__(self) -> str:
        return self.xpath


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def _attr_tests(attrs: dict) -> Tuple[AttrTest, ...]:
    # class_ -> class, the BeautifulSoup keyword convention
    return tuple(AttrTest(name.rstrip("_").replace("_", "-"), str(value)) for name, value in attrs.items())


def descendant(tag: str = "*", position: Optional[Position] = None, **attrs: str) -> Step:
    """
    Step matching `tag` anywhere beneath the context node.
    """
    return Step(tag=tag, attrs=_attr_tests(attrs), axis=DESCENDANT, position=position)


def child(tag: str = "*", position: Optional[Position] = None, **attrs: str) -> Step:
    """
    Step matching `tag` among the direct children of the context node.
    """
    return Step(tag=tag, attrs=_attr_tests(attrs), axis=CHILD, position=position)


def path(*steps: Step, absolute: bool = False, position: Optional[Position] = None) -> Selector:
    if not steps:
        raise ValueError("a selector needs at least one step")
    return Selector(steps=tuple(steps), absolute=absolute, position=position)
