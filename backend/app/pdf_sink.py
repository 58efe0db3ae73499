from __future__ import annotations

from pathlib import Path
from typing import Protocol

from fpdf import FPDF
from PIL import Image

from .config import FONT_DIR, PAGE_FORMAT
from .glyphs import sanitize_for_core_font
from .layout_types import TextStyle
from .logging_utils import get_logger

log = get_logger(__name__)

_UNICODE_FONT = {
    "family": "DejaVuSans",
    "files": {
        "": "DejaVuSans.ttf",
        "B": "DejaVuSans-Bold.ttf",
        "I": "DejaVuSans-Oblique.ttf",
        "BI": "DejaVuSans-BoldOblique.ttf",
    },
}
_CORE_FAMILY = "Helvetica"
# Baseline sits this far below the top of the line box, as a fraction of font size.
_BASELINE_RATIO = 0.85


class SinkError(RuntimeError):
    pass


class Sink(Protocol):
    @property
    def page_width(self) -> float: ...

    @property
    def page_height(self) -> float: ...

    @property
    def page_no(self) -> int: ...

    def add_page(self) -> None: ...

    def text_width(self, text: str, style: TextStyle) -> float: ...

    def draw_text(self, x: float, y: float, text: str, style: TextStyle) -> None: ...

    def draw_image(self, image: Image.Image, x: float, y: float, w: float, h: float) -> None: ...

    def draw_line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        *,
        color: tuple[int, int, int] = (0, 0, 0),
        width: float = 0.2,
    ) -> None: ...

    def draw_rect(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        *,
        fill: tuple[int, int, int] | None = None,
        border: tuple[int, int, int] | None = None,
    ) -> None: ...

    def output(self) -> bytes: ...


def _register_unicode_font(pdf: FPDF, font_dir: Path) -> str | None:
    files = _UNICODE_FONT["files"]
    if not font_dir.exists() or not (font_dir / files[""]).exists():
        return None
    family = _UNICODE_FONT["family"]
    for style, filename in files.items():
        path = font_dir / filename
        if not path.exists():
            # Missing faces fall back to the regular file so every style resolves.
            path = font_dir / files[""]
        pdf.add_font(family, style=style, fname=str(path))
    return family


class FpdfSink:
    def __init__(
        self,
        *,
        title: str | None = None,
        page_format: str = PAGE_FORMAT,
        font_dir: Path = FONT_DIR,
        page_numbers: bool = True,
    ) -> None:
        try:
            pdf = FPDF(orientation="P", unit="mm", format=page_format)
            unicode_family = _register_unicode_font(pdf, font_dir)
        except Exception as e:
            raise SinkError(f"Failed to initialise PDF writer: {e}") from e
        pdf.set_auto_page_break(auto=False)
        self.pdf = pdf
        self.family = unicode_family or _CORE_FAMILY
        self.allow_unicode = unicode_family is not None
        if unicode_family:
            log.debug("Registered Unicode font %s from %s", unicode_family, font_dir)
        if title:
            pdf.set_title(self._safe(title))
        if page_numbers:
            family = self.family

            def footer(self: FPDF) -> None:
                self.set_y(-12)
                self.set_font(family, "", 8)
                self.set_text_color(110, 110, 110)
                self.cell(0, 8, str(self.page_no()), align="C")

            pdf.footer = footer.__get__(pdf, FPDF)
        pdf.add_page()

    def _safe(self, text: str) -> str:
        if self.allow_unicode:
            return text
        return sanitize_for_core_font(text)

    def _set_style(self, style: TextStyle) -> None:
        self.pdf.set_font(self.family, style.font_style, style.font_size)
        self.pdf.set_text_color(*style.color)

    @property
    def page_width(self) -> float:
        return float(self.pdf.w)

    @property
    def page_height(self) -> float:
        return float(self.pdf.h)

    @property
    def page_no(self) -> int:
        return int(self.pdf.page_no())

    def add_page(self) -> None:
        self.pdf.add_page()

    def text_width(self, text: str, style: TextStyle) -> float:
        if not text:
            return 0.0
        self._set_style(style)
        return float(self.pdf.get_string_width(self._safe(text)))

    def draw_text(self, x: float, y: float, text: str, style: TextStyle) -> None:
        if not text:
            return
        self._set_style(style)
        baseline = y + self.pdf.font_size * _BASELINE_RATIO
        self.pdf.text(x, baseline, self._safe(text))

    def draw_image(self, image: Image.Image, x: float, y: float, w: float, h: float) -> None:
        self.pdf.image(image, x=x, y=y, w=w, h=h)

    def draw_line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        *,
        color: tuple[int, int, int] = (0, 0, 0),
        width: float = 0.2,
    ) -> None:
        self.pdf.set_draw_color(*color)
        self.pdf.set_line_width(width)
        self.pdf.line(x1, y1, x2, y2)

    def draw_rect(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        *,
        fill: tuple[int, int, int] | None = None,
        border: tuple[int, int, int] | None = None,
    ) -> None:
        if fill is None and border is None:
            return
        style = ""
        if border is not None:
            self.pdf.set_draw_color(*border)
            self.pdf.set_line_width(0.2)
            style += "D"
        if fill is not None:
            self.pdf.set_fill_color(*fill)
            style = "F" + style
        self.pdf.rect(x, y, w, h, style=style)

    def output(self) -> bytes:
        try:
            data = self.pdf.output()
        except Exception as e:
            raise SinkError(f"Failed to write PDF: {e}") from e
        if isinstance(data, (bytes, bytearray)):
            return bytes(data)
        return str(data).encode("latin-1", "replace")
