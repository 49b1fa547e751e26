"""
Central data model definitions used across the project.

CourseRef      one course link on the index page
CoursePage     one fetched and parsed course page
SessionRecord  one offered session (one row in the final dataset)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from unisport.tree import Document

# Column order of every table and of the final dataset.
COLUMNS: List[str] = ["Course", "Level", "Day", "Time", "Period", "Prices"]


@dataclass(frozen=True)
class CourseRef:
    """
    Display name and relative link of one course, in index-page order.
    """

    name: str
    href: str


@dataclass
class CoursePage:
    """
    A parsed course page, named after the CourseRef it was fetched for.
    """

    name: str
    url: str
    document: Document


@dataclass(frozen=True)
class SessionRecord:
    course: str
    level: str
    day: str
    time: str
    period: str
    price: str
