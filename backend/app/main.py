from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence

from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware

from .config import PAGE_FORMAT
from .logging_utils import get_logger
from .pdf_export import ExportBusyError, ExportError, PdfExporter, blocks_from_chat_response
from .schemas import ChatResponseExportRequest, ContentBlock, ErrorResponse, ExportRequest

log = get_logger(__name__)

app = FastAPI(title="chat-pdf-export")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

exporter = PdfExporter()

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _pdf_filename() -> str:
    return f"chat-response-{datetime.now().strftime('%Y-%m-%d')}.pdf"


async def _export_response(blocks: Sequence[ContentBlock], *, title: str | None) -> Response:
    try:
        result = await exporter.export(blocks, title=title)
    except ExportBusyError as e:
        log.warning("Rejected PDF export: %s", e)
        raise HTTPException(status_code=409, detail=str(e)) from e
    except ExportError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    headers = {
        "Content-Disposition": f'attachment; filename="{_pdf_filename()}"',
        "X-Export-Run-Id": result.run_id,
        "X-Export-Pages": str(result.pages),
    }
    if result.skipped:
        headers["X-Export-Skipped"] = ",".join(result.skipped)
    return Response(content=result.pdf, media_type="application/pdf", headers=headers)


@app.get("/health")
def health() -> dict[str, Any]:
    return {
        "status": "ok",
        "page_format": PAGE_FORMAT,
        "export_running": exporter.busy,
    }


@app.post("/export/pdf", responses=_ERROR_RESPONSES)
async def export_pdf(req: ExportRequest) -> Response:
    return await _export_response(req.blocks, title=req.title)


@app.post("/export/chat-response", responses=_ERROR_RESPONSES)
async def export_chat_response(req: ChatResponseExportRequest) -> Response:
    blocks = blocks_from_chat_response(
        req.question,
        req.answer,
        chart_data=req.chart_data,
        chart_type=req.chart_type,
    )
    return await _export_response(blocks, title=req.title or "Chat response")
