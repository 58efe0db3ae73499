from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Union


class LayoutError(RuntimeError):
    pass


class Indent(str, Enum):
    NONE = "none"
    MAIN = "main"
    SUB = "sub"


@dataclass(frozen=True)
class StyledRun:
    text: str
    bold: bool = False
    italic: bool = False

    @property
    def font_style(self) -> str:
        if self.bold and self.italic:
            return "BI"
        if self.bold:
            return "B"
        if self.italic:
            return "I"
        return ""


@dataclass(frozen=True)
class Run:
    run: StyledRun


@dataclass(frozen=True)
class BulletStart:
    indent: Indent


@dataclass(frozen=True)
class LineEnd:
    pass


@dataclass(frozen=True)
class ParagraphBreak:
    pass


LineToken = Union[Run, BulletStart, LineEnd, ParagraphBreak]


@dataclass(frozen=True)
class TextStyle:
    font_size: float = 10.0
    color: tuple[int, int, int] = (0, 0, 0)
    bold: bool = False
    italic: bool = False

    @property
    def font_style(self) -> str:
        return StyledRun("", self.bold, self.italic).font_style

    def for_run(self, run: StyledRun) -> TextStyle:
        return replace(self, bold=run.bold, italic=run.italic)


@dataclass(frozen=True)
class PageFrame:
    top: float
    bottom: float


@dataclass(frozen=True)
class Cursor:
    y: float
    page: int = 1

    def moved(self, dy: float) -> Cursor:
        if dy < 0:
            raise LayoutError(f"Cursor cannot move backwards (dy={dy})")
        return Cursor(y=self.y + dy, page=self.page)


def next_page(sink, cursor: Cursor, frame: PageFrame) -> Cursor:
    """Start a new physical page and return the cursor at its top margin.

    Breaking a page that has nothing on it cannot make room for anything,
    so it raises LayoutError instead of looping.
    """
    if cursor.y <= frame.top:
        raise LayoutError(f"Unresolvable page break on page {cursor.page} (y={cursor.y:.1f})")
    sink.add_page()
    return Cursor(y=frame.top, page=cursor.page + 1)
