from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Protocol

from PIL import Image

from .config import CAPTURE_BACKGROUND, CAPTURE_SCALE, CHART_SETTLE_S, INITIAL_SETTLE_S
from .logging_utils import get_logger

log = get_logger(__name__)


class CaptureError(RuntimeError):
    pass


class HandleNotMounted(CaptureError):
    pass


class Renderable(Protocol):
    async def render_to_bitmap(self, *, scale: float, background_color: str) -> Image.Image: ...


class HandleRegistry:
    """Capture handles for every in-flight export, keyed by (run id, handle).

    Two runs that reuse the same block id never see each other's handles.
    """

    def __init__(self) -> None:
        self._handles: dict[tuple[str, str], Renderable] = {}

    def __len__(self) -> int:
        return len(self._handles)

    def mount(self, run_id: str, handle: str, renderable: Renderable) -> None:
        self._handles[(run_id, handle)] = renderable

    def resolve(self, run_id: str, handle: str) -> Renderable:
        try:
            return self._handles[(run_id, handle)]
        except KeyError:
            raise HandleNotMounted(f"No renderable mounted for handle '{handle}'") from None

    def release(self, run_id: str) -> int:
        keys = [key for key in self._handles if key[0] == run_id]
        for key in keys:
            del self._handles[key]
        return len(keys)


class CaptureSession:
    def __init__(
        self,
        registry: HandleRegistry,
        run_id: str,
        *,
        initial_settle_s: float = INITIAL_SETTLE_S,
        settle_s: float = CHART_SETTLE_S,
        scale: float = CAPTURE_SCALE,
        background_color: str = CAPTURE_BACKGROUND,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.registry = registry
        self.run_id = run_id
        self.initial_settle_s = initial_settle_s
        self.settle_s = settle_s
        self.scale = scale
        self.background_color = background_color
        self._sleep = sleep
        self._settled = False
        self._busy = False
        self.captured = 0

    async def capture_one(self, handle: str) -> Image.Image:
        if self._busy:
            raise CaptureError("Another capture is in progress; captures run one at a time")
        self._busy = True
        try:
            if not self._settled:
                # Give every block's visual content time to mount before the first capture.
                await self._sleep(self.initial_settle_s)
                self._settled = True
            renderable = self.registry.resolve(self.run_id, handle)
            await self._sleep(self.settle_s)
            try:
                image = await renderable.render_to_bitmap(scale=self.scale, background_color=self.background_color)
            except CaptureError:
                raise
            except Exception as e:
                raise CaptureError(f"Capture of '{handle}' failed: {e}") from e
            if image is None or image.width <= 0 or image.height <= 0:
                raise CaptureError(f"Capture of '{handle}' produced an empty bitmap")
            self.captured += 1
            log.debug("Captured %s (%dx%d)", handle, image.width, image.height)
            return image
        finally:
            self._busy = False
