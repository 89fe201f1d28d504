from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from mousetotouch.core.types import GestureRequest, Point, ScreenGeometry


# slot index -> contact position for one frame; empty dict = no fingers down
TouchFrame = Tuple[int, Dict[int, Point]]


def touch_frames(req: GestureRequest, frame_ms: int = 8) -> List[TouchFrame]:
    """
    Sample a gesture into fixed-interval frames.

    Every stroke gets its own slot and all slots advance on the same timeline,
    so co-submitted strokes are down at the same time (multi-touch).
    The last frame holds every stroke at its end point; the lift comes after it.
    """
    if frame_ms <= 0:
        raise ValueError("frame_ms must be positive")

    total = req.duration_ms
    frames: List[TouchFrame] = []
    t = 0
    while True:
        contacts: Dict[int, Point] = {}
        for slot, stroke in enumerate(req.strokes):
            local = t - stroke.start_ms
            if 0 <= local <= stroke.duration_ms:
                contacts[slot] = stroke.point_at(local)
        frames.append((t, contacts))
        if t >= total:
            break
        t = min(total, t + frame_ms)
    return frames


@dataclass
class RecordingExecutor:
    """Keeps every dispatched gesture in memory. Used for --dry-run and tests."""
    requests: List[GestureRequest] = field(default_factory=list)
    verbose: bool = False
    cancels: int = 0
    geometry: Optional[ScreenGeometry] = None

    def dispatch(self, request: GestureRequest) -> None:
        self.requests.append(request)
        if self.verbose:
            print(f"[Touch] (dry-run) {request.kind.value} x{len(request.strokes)} {request.duration_ms}ms")

    def cancel_pending(self) -> None:
        # nothing is ever pending: recording is instant
        self.cancels += 1

    def set_geometry(self, geometry: ScreenGeometry) -> None:
        self.geometry = geometry

    def close(self) -> None:
        pass
