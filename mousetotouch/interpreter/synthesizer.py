from __future__ import annotations

from typing import Optional, Protocol

from mousetotouch.core.config import Preset
from mousetotouch.core.types import (
    GestureIntent, GestureRequest, IntentKind,
    ScreenGeometry, ScrollIntent, StrokePath, ZoomIntent,
)


class GestureExecutor(Protocol):
    """
    Anything that can play back a GestureRequest. dispatch() must not block.
    cancel_pending() drops what has not started playing yet.
    """

    def dispatch(self, request: GestureRequest) -> None: ...

    def cancel_pending(self) -> None: ...

    def set_geometry(self, geometry: ScreenGeometry) -> None: ...


class GestureSynthesizer:
    """
    Intent -> concrete strokes, always inside [0, width] x [0, height].

    Scroll: one stroke anchor -> current.
    Zoom:   two vertical fingers around screen center, submitted together.
    """

    def __init__(self, preset: Preset) -> None:
        self.preset = preset

    def synthesize(self, intent: GestureIntent, geometry: ScreenGeometry) -> Optional[GestureRequest]:
        if isinstance(intent, ScrollIntent):
            return self._scroll(intent, geometry)
        if isinstance(intent, ZoomIntent):
            return self._zoom(intent, geometry)
        return None

    def submit(self, intent: GestureIntent, geometry: ScreenGeometry,
               executor: GestureExecutor) -> Optional[GestureRequest]:
        req = self.synthesize(intent, geometry)
        if req is not None:
            # fire-and-forget: no result, no retry
            executor.dispatch(req)
        return req

    def _degenerate(self, x0: float, y0: float, x1: float, y1: float) -> bool:
        eps = self.preset.scroll.epsilon_px
        return abs(x1 - x0) < eps and abs(y1 - y0) < eps

    def _scroll(self, intent: ScrollIntent, geometry: ScreenGeometry) -> Optional[GestureRequest]:
        x0, y0 = geometry.clamp(intent.from_x, intent.from_y)
        x1, y1 = geometry.clamp(intent.to_x, intent.to_y)
        if self._degenerate(x0, y0, x1, y1):
            return None

        stroke = StrokePath(points=((x0, y0), (x1, y1)), duration_ms=self.preset.scroll.duration_ms)
        return GestureRequest(kind=IntentKind.SCROLL, strokes=(stroke,))

    def _zoom(self, intent: ZoomIntent, geometry: ScreenGeometry) -> Optional[GestureRequest]:
        z = self.preset.zoom
        cx, cy = geometry.center
        near = z.gap_px
        far = z.gap_px + z.travel_px

        if intent.zoom_in:
            # pinch open: fingers start near center and spread out
            top = ((cx, cy - near), (cx, cy - far))
            bottom = ((cx, cy + near), (cx, cy + far))
        else:
            # pinch close: fingers start far apart and come together
            top = ((cx, cy - far), (cx, cy - near))
            bottom = ((cx, cy + far), (cx, cy + near))

        strokes = []
        for (sx, sy), (ex, ey) in (top, bottom):
            sx, sy = geometry.clamp(sx, sy)
            ex, ey = geometry.clamp(ex, ey)
            if self._degenerate(sx, sy, ex, ey):
                # a one-finger "pinch" would play back as a drag
                return None
            strokes.append(StrokePath(points=((sx, sy), (ex, ey)), duration_ms=z.duration_ms))

        return GestureRequest(kind=IntentKind.ZOOM, strokes=tuple(strokes))
