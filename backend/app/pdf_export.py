from __future__ import annotations

import asyncio
import base64
import binascii
import uuid
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Mapping, Sequence

from .capture import CaptureSession, HandleRegistry, Renderable
from .charts import ChartFigure, StaticImage
from .config import CHART_SETTLE_S, DEFAULT_LAYOUT, INITIAL_SETTLE_S, LayoutSettings
from .logging_utils import get_logger
from .pdf_sink import FpdfSink, Sink
from .schemas import ChartBlock, ChartPoint, ContentBlock, TextBlock
from .sequencer import BlockSequencer, TableRenderer
from .tables import draw_table

log = get_logger(__name__)


class ExportError(RuntimeError):
    pass


class ExportBusyError(ExportError):
    pass


@dataclass
class ExportResult:
    pdf: bytes
    run_id: str
    pages: int
    skipped: list[str] = field(default_factory=list)


def blocks_from_chat_response(
    question: str,
    answer: str,
    *,
    chart_data: Sequence[ChartPoint] = (),
    chart_type: str = "bar",
) -> list[ContentBlock]:
    blocks: list[ContentBlock] = [
        TextBlock(id="question", heading="Question", body=question),
        TextBlock(id="answer", heading="Answer", body=answer or ""),
    ]
    if chart_data:
        blocks.append(ChartBlock(id="chart", heading="Chart", chart_type=chart_type, data=list(chart_data)))
    return blocks


def _default_renderable(block: ChartBlock) -> Renderable | None:
    if block.data:
        return ChartFigure(block.data, chart_type=block.chart_type)
    if block.image_base64:
        raw = block.image_base64
        if raw.startswith("data:") and "," in raw:
            raw = raw.split(",", 1)[1]
        try:
            return StaticImage(base64.b64decode(raw, validate=True))
        except (binascii.Error, ValueError) as e:
            log.warning("Chart %s has undecodable image data: %s", block.id, e)
    return None


class PdfExporter:
    """Turns content blocks into one PDF, one export at a time.

    A call made while another export is running fails fast with
    ``ExportBusyError`` instead of queueing.
    """

    def __init__(
        self,
        *,
        settings: LayoutSettings = DEFAULT_LAYOUT,
        registry: HandleRegistry | None = None,
        sink_factory: Callable[..., Sink] = FpdfSink,
        table_renderer: TableRenderer = draw_table,
        initial_settle_s: float = INITIAL_SETTLE_S,
        settle_s: float = CHART_SETTLE_S,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.settings = settings
        self.registry = registry if registry is not None else HandleRegistry()
        self.sink_factory = sink_factory
        self.table_renderer = table_renderer
        self.initial_settle_s = initial_settle_s
        self.settle_s = settle_s
        self._sleep = sleep
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    def _mount_handles(
        self,
        run_id: str,
        blocks: Sequence[ContentBlock],
        handles: Mapping[str, Renderable] | None,
    ) -> None:
        supplied = dict(handles or {})
        for block in blocks:
            if not isinstance(block, ChartBlock):
                continue
            renderable = supplied.get(block.handle) or _default_renderable(block)
            if renderable is not None:
                self.registry.mount(run_id, block.handle, renderable)

    async def export(
        self,
        blocks: Sequence[ContentBlock],
        *,
        title: str | None = None,
        handles: Mapping[str, Renderable] | None = None,
    ) -> ExportResult:
        if self._busy:
            raise ExportBusyError("A PDF export is already running")
        self._busy = True
        run_id = uuid.uuid4().hex
        try:
            log.info("PDF export %s started (%d blocks)", run_id, len(blocks))
            self._mount_handles(run_id, blocks, handles)
            sink = self.sink_factory(title=title)
            capture = CaptureSession(
                self.registry,
                run_id,
                initial_settle_s=self.initial_settle_s,
                settle_s=self.settle_s,
                sleep=self._sleep,
            )
            sequencer = BlockSequencer(
                sink,
                capture,
                settings=self.settings,
                table_renderer=self.table_renderer,
            )
            await sequencer.render(blocks)
            data = sink.output()
            pages = sink.page_no
        except ExportError:
            raise
        except Exception as e:
            log.exception("PDF export %s failed", run_id)
            raise ExportError(f"Failed to generate PDF: {e}") from e
        finally:
            self.registry.release(run_id)
            self._busy = False
        if sequencer.skipped:
            log.warning("PDF export %s skipped blocks: %s", run_id, ", ".join(sequencer.skipped))
        log.info("PDF export %s finished: %d pages, %d bytes", run_id, pages, len(data))
        return ExportResult(pdf=data, run_id=run_id, pages=pages, skipped=list(sequencer.skipped))
