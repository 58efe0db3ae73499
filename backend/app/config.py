from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


REPO_ROOT = _repo_root()

PAGE_FORMAT = os.getenv("CHATPDF_PAGE_FORMAT", "A4")
FONT_DIR = Path(os.getenv("CHATPDF_FONT_DIR", str(REPO_ROOT / "backend" / "assets" / "fonts")))

INITIAL_SETTLE_S = _env_float("CHATPDF_INITIAL_SETTLE_S", 1.0)
CHART_SETTLE_S = _env_float("CHATPDF_CHART_SETTLE_S", 0.5)
CAPTURE_SCALE = _env_float("CHATPDF_CAPTURE_SCALE", 2.0)
CAPTURE_BACKGROUND = os.getenv("CHATPDF_CAPTURE_BACKGROUND", "#ffffff")

LOG_LEVEL = os.getenv("CHATPDF_LOG_LEVEL", "INFO").upper()

HOST = os.getenv("CHATPDF_HOST", "127.0.0.1")
PORT = int(_env_float("CHATPDF_PORT", 8000))


@dataclass(frozen=True)
class LayoutSettings:
    # All lengths are millimetres, font sizes are points.
    margin_left: float = 15.0
    margin_right: float = 15.0
    margin_top: float = 15.0
    line_height: float = 7.0
    font_size: float = 10.0
    text_color: tuple[int, int, int] = (0, 0, 0)
    heading_size: float = 14.0
    heading_height: float = 10.0
    heading_color: tuple[int, int, int] = (20, 20, 20)
    rule_gap: float = 3.0
    rule_color: tuple[int, int, int] = (200, 200, 200)
    bullet_indent_main: float = 8.0
    bullet_indent_sub: float = 20.0
    bullet_offset_main: float = 2.0
    bullet_offset_sub: float = 12.0
    text_bottom_margin: float = 25.0
    table_reserved_margin: float = 40.0
    table_bottom_margin: float = 20.0
    chart_reserved_margin: float = 20.0
    block_gap: float = 5.0
    fallback_height: float = 20.0
    table_font_size: float = 9.0

    def content_width(self, page_width: float) -> float:
        return page_width - self.margin_left - self.margin_right


DEFAULT_LAYOUT = LayoutSettings()
