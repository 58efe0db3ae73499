from __future__ import annotations

import re
from typing import Iterable

from .config import DEFAULT_LAYOUT, LayoutSettings
from .layout_types import (
    BulletStart,
    Cursor,
    Indent,
    LineEnd,
    LineToken,
    PageFrame,
    ParagraphBreak,
    Run,
    StyledRun,
    TextStyle,
    next_page,
)
from .pdf_sink import Sink

BULLET_GLYPH = "\u2022"
_WORD_SPLIT_RE = re.compile(r"(\s+)")
_PLAIN = StyledRun("")


def indent_offset(indent: Indent, settings: LayoutSettings = DEFAULT_LAYOUT) -> float:
    if indent is Indent.SUB:
        return settings.bullet_indent_sub
    if indent is Indent.MAIN:
        return settings.bullet_indent_main
    return 0.0


def bullet_offset(indent: Indent, settings: LayoutSettings = DEFAULT_LAYOUT) -> float:
    if indent is Indent.SUB:
        return settings.bullet_offset_sub
    return settings.bullet_offset_main


class _LineWriter:
    def __init__(
        self,
        sink: Sink,
        cursor: Cursor,
        *,
        x: float,
        max_width: float,
        style: TextStyle,
        line_height: float,
        frame: PageFrame,
        settings: LayoutSettings,
    ) -> None:
        self.sink = sink
        self.cursor = cursor
        self.x = x
        self.right = x + max_width
        self.style = style
        self.line_height = line_height
        self.frame = frame
        self.settings = settings

    def _advance_line(self) -> None:
        self.cursor = self.cursor.moved(self.line_height)
        if self.cursor.y > self.frame.bottom:
            self.cursor = next_page(self.sink, self.cursor, self.frame)

    def _chunks(self, word: str, style: TextStyle, width: float) -> Iterable[str]:
        buf = ""
        for ch in word:
            if buf and self.sink.text_width(buf + ch, style) > width:
                yield buf
                buf = ""
            buf += ch
        if buf:
            yield buf

    def _place_word(self, word: str, style: TextStyle, pen: float, left: float, spaced: bool) -> float:
        text = f" {word}" if spaced and pen > left else word
        width = self.sink.text_width(text, style)
        if pen + width <= self.right:
            self.sink.draw_text(pen, self.cursor.y, text, style)
            return pen + width
        if pen > left:
            self._advance_line()
            pen = left
        width = self.sink.text_width(word, style)
        if left + width <= self.right:
            self.sink.draw_text(left, self.cursor.y, word, style)
            return left + width
        for chunk in self._chunks(word, style, self.right - left):
            if pen > left:
                self._advance_line()
                pen = left
            self.sink.draw_text(left, self.cursor.y, chunk, style)
            pen = left + self.sink.text_width(chunk, style)
        return pen

    def flush(self, indent: Indent, runs: list[StyledRun]) -> None:
        if self.cursor.y > self.frame.bottom:
            self.cursor = next_page(self.sink, self.cursor, self.frame)
        left = self.x + indent_offset(indent, self.settings)
        if indent is not Indent.NONE:
            self.sink.draw_text(
                self.x + bullet_offset(indent, self.settings),
                self.cursor.y,
                BULLET_GLYPH,
                self.style.for_run(_PLAIN),
            )
        pen = left
        spaced = False
        for run in runs:
            run_style = self.style.for_run(run)
            for part in _WORD_SPLIT_RE.split(run.text):
                if not part:
                    continue
                if part.isspace():
                    spaced = True
                    continue
                pen = self._place_word(part, run_style, pen, left, spaced)
                spaced = False
        self.cursor = self.cursor.moved(self.line_height)


def layout_tokens(
    sink: Sink,
    tokens: list[LineToken],
    cursor: Cursor,
    *,
    x: float,
    max_width: float,
    style: TextStyle,
    line_height: float,
    frame: PageFrame,
    settings: LayoutSettings = DEFAULT_LAYOUT,
) -> Cursor:
    writer = _LineWriter(
        sink,
        cursor,
        x=x,
        max_width=max_width,
        style=style,
        line_height=line_height,
        frame=frame,
        settings=settings,
    )
    indent = Indent.NONE
    pending: list[StyledRun] = []
    has_line = False
    for token in tokens:
        if isinstance(token, BulletStart):
            indent = token.indent
            has_line = True
        elif isinstance(token, Run):
            pending.append(token.run)
            has_line = True
        elif isinstance(token, (LineEnd, ParagraphBreak)):
            if has_line:
                writer.flush(indent, pending)
            else:
                # A line with nothing drawable still takes up one line.
                writer.cursor = writer.cursor.moved(line_height)
            # Indentation belongs to one line only.
            indent = Indent.NONE
            pending = []
            has_line = False
    if has_line:
        writer.flush(indent, pending)
    return writer.cursor
