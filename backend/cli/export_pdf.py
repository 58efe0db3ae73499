from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from backend.app.pdf_export import ExportError, PdfExporter
from backend.app.schemas import ExportRequest


def log(msg: str) -> None:
    print(msg, file=sys.stderr)


def load_request(path: Path, title: str | None) -> ExportRequest:
    raw: Any = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(raw, list):
        raw = {"blocks": raw}
    if title and isinstance(raw, dict):
        raw["title"] = title
    return ExportRequest.model_validate(raw)


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Render a JSON list of chat content blocks into a PDF.")
    ap.add_argument("input", type=Path, help="JSON file: a list of blocks or {\"title\": ..., \"blocks\": [...]}")
    ap.add_argument("-o", "--output", type=Path, default=None, help="Output PDF path (defaults to input name with .pdf)")
    ap.add_argument("--title", type=str, default=None, help="Document title stored in the PDF metadata")
    ap.add_argument("--no-settle", action="store_true", help="Skip chart settle delays (no live UI to wait for)")
    args = ap.parse_args(argv)

    try:
        req = load_request(args.input, args.title)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        log(f"Invalid input {args.input}: {e}")
        return 2

    exporter = PdfExporter(initial_settle_s=0.0, settle_s=0.0) if args.no_settle else PdfExporter()
    try:
        result = asyncio.run(exporter.export(req.blocks, title=req.title))
    except ExportError as e:
        log(f"PDF export failed: {e}")
        return 1

    out_path = args.output or args.input.with_suffix(".pdf")
    out_path.write_bytes(result.pdf)
    log(f"Wrote {out_path} ({result.pages} pages)")
    if result.skipped:
        log(f"Skipped blocks: {', '.join(result.skipped)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
