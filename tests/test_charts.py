"""
Tests for server-side chart renderables
"""

import base64
from io import BytesIO

import pytest
from PIL import Image

from backend.app.capture import CaptureError
from backend.app.charts import ChartFigure, StaticImage
from backend.app.schemas import ChartPoint

POINTS = [ChartPoint(name="Mon", value=3), ChartPoint(name="Tue", value=5, value2=2)]


class TestChartFigure:
    """Test matplotlib rendering of bar and line charts"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("chart_type", ["bar", "line"])
    async def test_renders_rgb_bitmap(self, chart_type):
        image = await ChartFigure(POINTS, chart_type=chart_type).render_to_bitmap(
            scale=1.0, background_color="#ffffff"
        )
        assert image.mode == "RGB"
        assert image.size == (800, 350)

    @pytest.mark.asyncio
    async def test_scale_multiplies_pixels(self):
        image = await ChartFigure(POINTS).render_to_bitmap(scale=2.0, background_color="#ffffff")
        assert image.size == (1600, 700)

    @pytest.mark.asyncio
    async def test_no_points(self):
        with pytest.raises(CaptureError):
            await ChartFigure([]).render_to_bitmap(scale=1.0, background_color="#ffffff")


class TestStaticImage:
    """Test client supplied bitmaps"""

    @pytest.mark.asyncio
    async def test_transparent_png_is_flattened(self):
        buf = BytesIO()
        Image.new("RGBA", (10, 10), (0, 0, 0, 0)).save(buf, format="PNG")
        image = await StaticImage(buf.getvalue()).render_to_bitmap(scale=2.0, background_color="#ffffff")
        assert image.mode == "RGB"
        assert image.getpixel((0, 0)) == (255, 255, 255)

    @pytest.mark.asyncio
    async def test_garbage_bytes(self):
        with pytest.raises(CaptureError):
            await StaticImage(base64.b64decode("bm90IGFuIGltYWdl")).render_to_bitmap(
                scale=1.0, background_color="#ffffff"
            )
