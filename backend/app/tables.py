from __future__ import annotations

from dataclasses import dataclass

from .glyphs import normalize_glyphs
from .layout_types import PageFrame, TextStyle
from .pdf_sink import Sink
from .text_format import parse_inline


class TableRenderError(RuntimeError):
    pass


@dataclass(frozen=True)
class TableStyle:
    font_size: float = 9.0
    min_font_size: float = 7.0
    padding: float = 2.0
    color: tuple[int, int, int] = (0, 0, 0)
    header_fill: tuple[int, int, int] = (235, 235, 235)
    border: tuple[int, int, int] = (200, 200, 200)
    repeat_header: bool = True


@dataclass(frozen=True)
class TableResult:
    final_y: float
    pages_added: int = 0


def _cell_text(cell: object) -> str:
    text = normalize_glyphs("" if cell is None else str(cell))
    text = " ".join(text.split())
    return "".join(run.text for run in parse_inline(text))


def _wrap_cell(sink: Sink, text: str, width: float, style: TextStyle) -> list[str]:
    if not text:
        return [""]
    lines: list[str] = []
    current = ""
    for word in text.split(" "):
        candidate = f"{current} {word}" if current else word
        if sink.text_width(candidate, style) <= width:
            current = candidate
            continue
        if current:
            lines.append(current)
            current = ""
        while sink.text_width(word, style) > width and len(word) > 1:
            cut = len(word) - 1
            while cut > 1 and sink.text_width(word[:cut], style) > width:
                cut -= 1
            lines.append(word[:cut])
            word = word[cut:]
        current = word
    if current:
        lines.append(current)
    return lines or [""]


def _column_widths(
    sink: Sink,
    rows: list[list[str]],
    cols: int,
    total_width: float,
    size: float,
    style: TableStyle,
    has_header: bool,
) -> list[float] | None:
    widths = [0.0] * cols
    for r_index, row in enumerate(rows):
        bold = has_header and r_index == 0
        cell_style = TextStyle(font_size=size, color=style.color, bold=bold)
        for c_index, cell in enumerate(row):
            width = sink.text_width(cell, cell_style) + style.padding * 2
            widths[c_index] = max(widths[c_index], width)
    total = sum(widths)
    if total <= 0:
        return [total_width / cols] * cols
    if total > total_width:
        scale = total_width / total
        widths = [w * scale for w in widths]
    min_char = max(4.0, sink.text_width("W", TextStyle(font_size=size)) + style.padding)
    if min(widths) < min_char:
        return None
    if total < total_width:
        # Spread the leftover width so the grid spans the content column.
        extra = (total_width - sum(widths)) / cols
        widths = [w + extra for w in widths]
    return widths


def draw_table(
    sink: Sink,
    *,
    start_y: float,
    columns: list[str],
    rows: list[list[str]],
    x: float,
    width: float,
    frame: PageFrame,
    style: TableStyle = TableStyle(),
) -> TableResult:
    """Draw a bordered grid and return where it ended.

    The header row is bold on a shaded background. Rows that do not fit above
    ``frame.bottom`` move to a new page, where the header is drawn again.
    """
    has_header = bool(columns)
    grid = ([[_cell_text(c) for c in columns]] if has_header else []) + [
        [_cell_text(c) for c in row] for row in rows
    ]
    if not grid:
        raise TableRenderError("Table has no rows")
    cols = max(len(r) for r in grid)
    if cols == 0:
        raise TableRenderError("Table has no columns")
    grid = [row + [""] * (cols - len(row)) for row in grid]

    widths: list[float] | None = None
    size = style.font_size
    while size >= style.min_font_size:
        widths = _column_widths(sink, grid, cols, width, size, style, has_header)
        if widths:
            break
        size -= 1
    if not widths:
        size = style.min_font_size
        widths = [width / cols] * cols

    line_height = max(4.0, size * 0.6)
    pad_v = style.padding / 2

    def layout_row(row: list[str], bold: bool) -> tuple[list[list[str]], float, TextStyle]:
        cell_style = TextStyle(font_size=size, color=style.color, bold=bold)
        split = [
            _wrap_cell(sink, cell, widths[i] - style.padding * 2, cell_style) for i, cell in enumerate(row)
        ]
        height = line_height * max(len(lines) for lines in split) + pad_v * 2
        return split, height, cell_style

    def paint_row(split: list[list[str]], height: float, cell_style: TextStyle, y: float, header: bool) -> None:
        cx = x
        for i, lines in enumerate(split):
            sink.draw_rect(
                cx,
                y,
                widths[i],
                height,
                fill=style.header_fill if header else None,
                border=style.border,
            )
            for n, line in enumerate(lines):
                sink.draw_text(cx + style.padding, y + pad_v + n * line_height, line, cell_style)
            cx += widths[i]

    header_layout = layout_row(grid[0], True) if has_header else None
    body = grid[1:] if has_header else grid
    y = start_y
    pages_added = 0
    if header_layout is not None:
        paint_row(*header_layout, y, True)
        y += header_layout[1]
    for row in body:
        split, height, cell_style = layout_row(row, False)
        if y + height > frame.bottom and y > frame.top:
            sink.add_page()
            pages_added += 1
            y = frame.top
            if header_layout is not None and style.repeat_header:
                paint_row(*header_layout, y, True)
                y += header_layout[1]
        paint_row(split, height, cell_style, y, False)
        y += height
    return TableResult(final_y=y, pages_added=pages_added)
