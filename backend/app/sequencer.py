from __future__ import annotations

from typing import Callable, Sequence

from .capture import CaptureError, CaptureSession
from .config import DEFAULT_LAYOUT, LayoutSettings
from .glyphs import normalize_glyphs
from .layout import layout_tokens
from .layout_types import Cursor, LayoutError, LineEnd, PageFrame, Run, StyledRun, TextStyle, next_page
from .logging_utils import get_logger
from .pdf_sink import Sink
from .schemas import ChartBlock, ContentBlock, TableBlock, TextBlock
from .tables import TableResult, TableStyle, draw_table
from .text_format import parse_formatted_text, plain_tokens

log = get_logger(__name__)

TableRenderer = Callable[..., TableResult]


class BlockSequencer:
    """Render blocks in order onto one sink, threading a single cursor.

    Each block finishes, including any chart capture, before the next one
    starts. Charts that cannot be captured and tables that fail to render leave
    a gap. They are listed in ``skipped`` along with empty tables. A cursor
    that moves backwards raises ``LayoutError``.
    """

    def __init__(
        self,
        sink: Sink,
        capture: CaptureSession,
        *,
        settings: LayoutSettings = DEFAULT_LAYOUT,
        table_renderer: TableRenderer = draw_table,
    ) -> None:
        self.sink = sink
        self.capture = capture
        self.settings = settings
        self.table_renderer = table_renderer
        self.x = settings.margin_left
        self.content_width = settings.content_width(sink.page_width)
        page_height = sink.page_height
        self.text_frame = PageFrame(top=settings.margin_top, bottom=page_height - settings.text_bottom_margin)
        self.table_frame = PageFrame(top=settings.margin_top, bottom=page_height - settings.table_bottom_margin)
        self.table_start_limit = page_height - settings.table_reserved_margin
        self.chart_bottom = page_height - settings.chart_reserved_margin
        self.body_style = TextStyle(font_size=settings.font_size, color=settings.text_color)
        self.heading_style = TextStyle(font_size=settings.heading_size, color=settings.heading_color, bold=True)
        self.table_style = TableStyle(font_size=settings.table_font_size)
        self.skipped: list[str] = []

    def start_cursor(self) -> Cursor:
        return Cursor(y=self.settings.margin_top, page=self.sink.page_no)

    async def render(self, blocks: Sequence[ContentBlock], cursor: Cursor | None = None) -> Cursor:
        cursor = cursor or self.start_cursor()
        for block in blocks:
            before = cursor
            if isinstance(block, TextBlock):
                cursor = self._render_text(block, cursor)
            elif isinstance(block, TableBlock):
                cursor = self._render_table(block, cursor)
            elif isinstance(block, ChartBlock):
                cursor = await self._render_chart(block, cursor)
            else:
                raise LayoutError(f"Unsupported block type: {type(block).__name__}")
            self._check_progress(block.id, before, cursor)
        return cursor

    def _check_progress(self, block_id: str, before: Cursor, after: Cursor) -> None:
        if after.page < before.page or (after.page == before.page and after.y < before.y):
            raise LayoutError(
                f"Cursor moved backwards on block '{block_id}': "
                f"page {before.page} y={before.y:.1f} -> page {after.page} y={after.y:.1f}"
            )

    def _break_page(self, cursor: Cursor) -> Cursor:
        return next_page(self.sink, cursor, self.text_frame)

    def _render_heading(self, text: str, cursor: Cursor) -> Cursor:
        settings = self.settings
        if cursor.y + settings.heading_height + settings.rule_gap > self.text_frame.bottom:
            cursor = self._break_page(cursor)
        cursor = layout_tokens(
            self.sink,
            [Run(StyledRun(normalize_glyphs(text).strip(), bold=True)), LineEnd()],
            cursor,
            x=self.x,
            max_width=self.content_width,
            style=self.heading_style,
            line_height=settings.heading_height,
            frame=self.text_frame,
            settings=settings,
        )
        self.sink.draw_line(
            self.x,
            cursor.y,
            self.x + self.content_width,
            cursor.y,
            color=settings.rule_color,
            width=0.3,
        )
        return cursor.moved(settings.rule_gap)

    def _render_text(self, block: TextBlock, cursor: Cursor) -> Cursor:
        tokens = parse_formatted_text(block.body) if block.styled else plain_tokens(block.body)
        if not tokens and not block.heading:
            return cursor
        if block.heading:
            cursor = self._render_heading(block.heading, cursor)
        cursor = layout_tokens(
            self.sink,
            tokens,
            cursor,
            x=self.x,
            max_width=self.content_width,
            style=self.body_style,
            line_height=self.settings.line_height,
            frame=self.text_frame,
            settings=self.settings,
        )
        return cursor.moved(self.settings.block_gap)

    def _render_table(self, block: TableBlock, cursor: Cursor) -> Cursor:
        if not block.rows:
            log.warning("Skipping table %s: no rows", block.id)
            self.skipped.append(block.id)
            return cursor
        heading_height = self.settings.heading_height + self.settings.rule_gap if block.heading else 0.0
        if cursor.y + heading_height > self.table_start_limit and cursor.y > self.text_frame.top:
            cursor = self._break_page(cursor)
        if block.heading:
            cursor = self._render_heading(block.heading, cursor)
        try:
            result = self.table_renderer(
                self.sink,
                start_y=cursor.y,
                columns=list(block.columns),
                rows=[list(row) for row in block.rows],
                x=self.x,
                width=self.content_width,
                frame=self.table_frame,
                style=self.table_style,
            )
        except Exception as e:
            log.warning("Table %s failed to render: %s", block.id, e)
            self.skipped.append(block.id)
            page = self.sink.page_no
            if page != cursor.page:
                cursor = Cursor(y=self.text_frame.top, page=page)
            return cursor.moved(self.settings.fallback_height)
        return Cursor(y=result.final_y, page=self.sink.page_no).moved(self.settings.block_gap)

    async def _render_chart(self, block: ChartBlock, cursor: Cursor) -> Cursor:
        settings = self.settings
        try:
            image = await self.capture.capture_one(block.handle)
        except CaptureError as e:
            log.warning("Skipping chart %s: %s", block.id, e)
            self.skipped.append(block.id)
            return cursor.moved(settings.fallback_height)

        heading_height = settings.heading_height + settings.rule_gap if block.heading else 0.0
        width = self.content_width
        height = width * image.height / image.width
        max_height = self.chart_bottom - self.text_frame.top - heading_height
        if height > max_height:
            width = width * max_height / height
            height = max_height
        if cursor.y + heading_height + height > self.chart_bottom and cursor.y > self.text_frame.top:
            cursor = self._break_page(cursor)
        if block.heading:
            cursor = self._render_heading(block.heading, cursor)
        x = self.x + (self.content_width - width) / 2
        self.sink.draw_image(image, x, cursor.y, width, height)
        return cursor.moved(height + settings.block_gap)
