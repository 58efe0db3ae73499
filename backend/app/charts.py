from __future__ import annotations

import asyncio
from io import BytesIO
from typing import Any, Sequence

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from PIL import Image

from .capture import CaptureError

_PRIMARY_COLOR = "#8884d8"
_SECONDARY_COLOR = "#82ca9d"
_BASE_DPI = 100
# Charts in the chat UI are drawn 350px tall at full column width.
_FIGSIZE = (8.0, 3.5)


def _flatten(image: Image.Image, background_color: str) -> Image.Image:
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        canvas = Image.new("RGB", rgba.size, background_color)
        canvas.paste(rgba, mask=rgba.getchannel("A"))
        return canvas
    return image.convert("RGB")


class ChartFigure:
    """Bar or line chart rendered with matplotlib from name/value points."""

    def __init__(self, points: Sequence[Any], *, chart_type: str = "bar") -> None:
        self.points = list(points)
        self.chart_type = chart_type

    def _series(self) -> tuple[list[str], list[float], list[float] | None]:
        names = [str(getattr(p, "name", "")) for p in self.points]
        values = [float(getattr(p, "value", 0.0) or 0.0) for p in self.points]
        second = None
        if self.points and getattr(self.points[0], "value2", None) is not None:
            second = [float(getattr(p, "value2", 0.0) or 0.0) for p in self.points]
        return names, values, second

    def _draw(self, scale: float, background_color: str) -> Image.Image:
        names, values, second = self._series()
        fig = Figure(figsize=_FIGSIZE, dpi=_BASE_DPI * scale, facecolor=background_color)
        FigureCanvasAgg(fig)
        ax = fig.add_subplot(1, 1, 1)
        ax.set_facecolor(background_color)
        ax.grid(True, linestyle="--", linewidth=0.5, alpha=0.6)
        ax.set_axisbelow(True)
        positions = list(range(len(names)))
        if self.chart_type == "line":
            ax.plot(positions, values, color=_PRIMARY_COLOR, linewidth=2, marker="o", label="value")
            if second is not None:
                ax.plot(positions, second, color=_SECONDARY_COLOR, linewidth=2, marker="o", label="value2")
        else:
            width = 0.4 if second is not None else 0.6
            offset = width / 2 if second is not None else 0.0
            ax.bar([p - offset for p in positions], values, width=width, color=_PRIMARY_COLOR, label="value")
            if second is not None:
                ax.bar([p + offset for p in positions], second, width=width, color=_SECONDARY_COLOR, label="value2")
        ax.set_xticks(positions)
        ax.set_xticklabels(names)
        ax.legend(loc="upper right", fontsize=8)
        fig.tight_layout()
        buf = BytesIO()
        fig.savefig(buf, format="png", facecolor=background_color)
        buf.seek(0)
        with Image.open(buf) as img:
            return _flatten(img, background_color)

    async def render_to_bitmap(self, *, scale: float, background_color: str) -> Image.Image:
        if not self.points:
            raise CaptureError("Chart has no data points")
        return await asyncio.to_thread(self._draw, scale, background_color)


class StaticImage:
    """A bitmap supplied by the client (PNG/JPEG bytes)."""

    def __init__(self, data: bytes) -> None:
        self.data = data

    async def render_to_bitmap(self, *, scale: float, background_color: str) -> Image.Image:
        try:
            with Image.open(BytesIO(self.data)) as img:
                img.load()
                return _flatten(img, background_color)
        except (OSError, ValueError) as e:
            raise CaptureError(f"Unreadable image data: {e}") from e
