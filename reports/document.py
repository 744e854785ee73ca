"""
Structured report document - a typed tree of sections, cards and tables.
Renderers walk this tree and handle escaping for their own output format.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Tuple, Union


class DocumentError(ValueError):
    """Raised when a document node is malformed."""
    pass


class Tone(str, Enum):
    """Styling hint for signed values."""
    POSITIVE = 'positive'
    NEGATIVE = 'negative'
    NEUTRAL = 'neutral'


def tone_for(value: float) -> Tone:
    """Values >= 0 are positive, values < 0 are negative."""
    return Tone.POSITIVE if value >= 0 else Tone.NEGATIVE


class Align(str, Enum):
    LEFT = 'left'
    RIGHT = 'right'


@dataclass(frozen=True)
class Card:
    """Label/value summary tile."""
    label: str
    value: str
    tone: Tone = Tone.NEUTRAL


@dataclass(frozen=True)
class CardGroup:
    cards: Tuple[Card, ...]


@dataclass(frozen=True)
class Column:
    title: str
    align: Align = Align.LEFT


@dataclass(frozen=True)
class Cell:
    text: str
    tone: Tone = Tone.NEUTRAL


@dataclass(frozen=True)
class Table:
    """Table whose rows all match the column count."""
    columns: Tuple[Column, ...]
    rows: Tuple[Tuple[Cell, ...], ...] = field(default_factory=tuple)

    def __post_init__(self):
        width = len(self.columns)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise DocumentError(
                    f"Row {index} has {len(row)} cells, table has {width} columns"
                )


@dataclass(frozen=True)
class InsightCard:
    """AI insight shown as supplied."""
    insight_type: str
    confidence: str
    title: str
    description: str


@dataclass(frozen=True)
class InsightList:
    insights: Tuple[InsightCard, ...]


SectionBody = Union[CardGroup, Table, InsightList]


@dataclass(frozen=True)
class Section:
    title: str
    body: SectionBody


@dataclass(frozen=True)
class HeaderBlock:
    brand: str
    title: str
    address: str
    generated: str


@dataclass(frozen=True)
class Footer:
    attribution: str
    generated_line: str
    disclaimer: str


@dataclass(frozen=True)
class Document:
    """
    Complete printable report.

    generated_at is the only input that may differ between two documents
    built from the same snapshot.
    """
    title: str
    header: HeaderBlock
    sections: Tuple[Section, ...]
    footer: Footer
    generated_at: datetime

    def section(self, title: str) -> Section:
        """Find a section by title."""
        for section in self.sections:
            if section.title == title:
                return section
        raise KeyError(title)
