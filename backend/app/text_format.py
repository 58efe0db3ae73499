from __future__ import annotations

import re

from .glyphs import normalize_glyphs
from .layout_types import BulletStart, Indent, LineEnd, LineToken, ParagraphBreak, Run, StyledRun

_LINE_SPLIT_RE = re.compile(r"\r\n|\r|\n")
_NUMBERED_RE = re.compile(r"^\d+\.\s")
_BULLET_RE = re.compile(r"^(?:\u2022\s*|-\s*|\*(?!\*)\s*)")


def _lex_inline(text: str) -> list[tuple[str, str]]:
    """Split a line into ("text", s) and ("delim", marker) pieces."""
    pieces: list[tuple[str, str]] = []
    buf: list[str] = []
    i = 0
    while i < len(text):
        # *** is tested before ** so bold-italic is one toggle, not two.
        if text.startswith("***", i):
            marker = "***"
        elif text.startswith("**", i):
            marker = "**"
        elif (
            text[i] == "*"
            and (i + 1 >= len(text) or text[i + 1] != "*")
            and (i == 0 or text[i - 1] != "*")
        ):
            marker = "*"
        else:
            buf.append(text[i])
            i += 1
            continue
        if buf:
            pieces.append(("text", "".join(buf)))
            buf = []
        pieces.append(("delim", marker))
        i += len(marker)
    if buf:
        pieces.append(("text", "".join(buf)))
    return pieces


def _apply_toggles(pieces: list[tuple[str, str]], literal: set[int]) -> tuple[list[StyledRun], int | None]:
    runs: list[StyledRun] = []
    bold = False
    italic = False
    opened_bold: int | None = None
    opened_italic: int | None = None
    for idx, (kind, value) in enumerate(pieces):
        if kind == "text" or idx in literal:
            runs.append(StyledRun(value, bold, italic))
            continue
        if value in ("***", "**"):
            bold = not bold
            opened_bold = idx if bold else None
        if value in ("***", "*"):
            italic = not italic
            opened_italic = idx if italic else None
    pending = [i for i in (opened_bold, opened_italic) if i is not None]
    return runs, (max(pending) if pending else None)


def _merge_runs(runs: list[StyledRun]) -> list[StyledRun]:
    merged: list[StyledRun] = []
    for run in runs:
        if not run.text:
            continue
        if merged and merged[-1].bold == run.bold and merged[-1].italic == run.italic:
            merged[-1] = StyledRun(merged[-1].text + run.text, run.bold, run.italic)
        else:
            merged.append(run)
    return merged


def parse_inline(text: str) -> list[StyledRun]:
    pieces = _lex_inline(text)
    literal: set[int] = set()
    while True:
        runs, unclosed = _apply_toggles(pieces, literal)
        if unclosed is None:
            return _merge_runs(runs)
        # An opener without a closer is printed as-is, then the line is re-read.
        literal.add(unclosed)


def _bullet_indent(line: str, trimmed: str) -> tuple[Indent, str]:
    if _NUMBERED_RE.match(trimmed):
        return Indent.NONE, trimmed
    if trimmed.startswith("**"):
        return Indent.NONE, trimmed
    match = _BULLET_RE.match(trimmed)
    if not match:
        return Indent.NONE, trimmed
    indent = Indent.SUB if line.startswith("\t") else Indent.MAIN
    return indent, trimmed[match.end() :].strip()


def parse_formatted_text(text: str | None) -> list[LineToken]:
    tokens: list[LineToken] = []
    source = normalize_glyphs(text)
    if not source:
        return tokens
    for line in _LINE_SPLIT_RE.split(source):
        trimmed = line.strip()
        if not trimmed:
            tokens.append(ParagraphBreak())
            continue
        indent, content = _bullet_indent(line, trimmed)
        if indent is not Indent.NONE:
            tokens.append(BulletStart(indent))
        runs = parse_inline(content)
        if not runs and indent is not Indent.NONE:
            runs = [StyledRun("")]
        tokens.extend(Run(run) for run in runs)
        tokens.append(LineEnd())
    return tokens


def plain_tokens(text: str | None) -> list[LineToken]:
    tokens: list[LineToken] = []
    source = normalize_glyphs(text)
    if not source:
        return tokens
    for line in _LINE_SPLIT_RE.split(source):
        if not line.strip():
            tokens.append(ParagraphBreak())
            continue
        tokens.append(Run(StyledRun(line.strip())))
        tokens.append(LineEnd())
    return tokens


def bullet_text(items: list[str]) -> str:
    return "\n".join(f"\u2022 {item}" for item in items)


def bold_text(text: str) -> str:
    return f"**{text}**"


def italic_text(text: str) -> str:
    return f"*{text}*"
