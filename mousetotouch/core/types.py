"""
MouseToTouch — CORE CONTRACTS

Pointer samples in, gesture requests out.
Every component (tracker, classifier, synthesizer, executor) speaks these types.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Optional, Tuple, Union


Point = Tuple[float, float]


# ============================================================
# Control plane
# ============================================================

class ModeState(str, Enum):
    IDLE = "IDLE"
    ACTIVE = "ACTIVE"


# ============================================================
# Input feed (host → core)
# ============================================================

class Phase(str, Enum):
    DOWN = "DOWN"
    MOVE = "MOVE"
    UP = "UP"
    CANCEL = "CANCEL"


class Buttons(IntFlag):
    """Pointer button mask. Bit values follow the platform button-state bits."""
    NONE = 0
    PRIMARY = 1
    SECONDARY = 2
    TERTIARY = 4


@dataclass(frozen=True)
class PointerSample:
    """One pointer event in screen-pixel space, stamped with a monotonic ms clock."""
    x: float
    y: float
    buttons: Buttons
    phase: Phase
    t_ms: int

    def is_well_formed(self) -> bool:
        for v in (self.x, self.y):
            if math.isnan(v) or math.isinf(v) or v < 0.0:
                return False
        return True


@dataclass(frozen=True)
class Delta:
    """
    Displacement of a MOVE sample against the current anchor.

    elapsed_ms is None while nothing has been dispatched since the last DOWN.
    """
    anchor_x: float
    anchor_y: float
    x: float
    y: float
    elapsed_ms: Optional[int]

    @property
    def dx(self) -> float:
        return self.x - self.anchor_x

    @property
    def dy(self) -> float:
        return self.y - self.anchor_y


# ============================================================
# Intents (classifier → synthesizer)
# ============================================================

class IntentKind(str, Enum):
    NONE = "NONE"
    SCROLL = "SCROLL"
    ZOOM = "ZOOM"


@dataclass(frozen=True)
class NoIntent:
    kind: IntentKind = IntentKind.NONE


@dataclass(frozen=True)
class ScrollIntent:
    from_x: float
    from_y: float
    to_x: float
    to_y: float
    kind: IntentKind = IntentKind.SCROLL


@dataclass(frozen=True)
class ZoomIntent:
    zoom_in: bool
    kind: IntentKind = IntentKind.ZOOM


GestureIntent = Union[NoIntent, ScrollIntent, ZoomIntent]

NO_INTENT = NoIntent()


# ============================================================
# Gestures (synthesizer → executor)
# ============================================================

@dataclass(frozen=True)
class ScreenGeometry:
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"screen geometry must be positive, got {self.width}x{self.height}")

    @property
    def center(self) -> Point:
        return (self.width / 2.0, self.height / 2.0)

    def clamp(self, x: float, y: float) -> Point:
        return (clamp(x, 0.0, float(self.width)), clamp(y, 0.0, float(self.height)))


@dataclass(frozen=True)
class StrokePath:
    """A single continuous contact: at least two waypoints played over duration_ms."""
    points: Tuple[Point, ...]
    duration_ms: int
    start_ms: int = 0

    def __post_init__(self) -> None:
        if len(self.points) < 2:
            raise ValueError("a stroke needs at least two waypoints")
        if self.duration_ms <= 0:
            raise ValueError("stroke duration must be positive")
        if self.start_ms < 0:
            raise ValueError("stroke start offset must not be negative")

    @property
    def start(self) -> Point:
        return self.points[0]

    @property
    def end(self) -> Point:
        return self.points[-1]

    def point_at(self, t_ms: float) -> Point:
        """Linear interpolation along the waypoints, t measured from the stroke start."""
        frac = clamp(t_ms / float(self.duration_ms), 0.0, 1.0)
        segs = len(self.points) - 1
        pos = frac * segs
        i = min(int(pos), segs - 1)
        local = pos - i
        (x0, y0), (x1, y1) = self.points[i], self.points[i + 1]
        return (x0 + (x1 - x0) * local, y0 + (y1 - y0) * local)


@dataclass(frozen=True)
class GestureRequest:
    """
    One atomic gesture.
    Strokes submitted together MUST be played as simultaneous contacts.
    """
    kind: IntentKind
    strokes: Tuple[StrokePath, ...]

    def __post_init__(self) -> None:
        if not self.strokes:
            raise ValueError("a gesture needs at least one stroke")

    @property
    def duration_ms(self) -> int:
        return max(s.start_ms + s.duration_ms for s in self.strokes)


def clamp(v: float, lo: float, hi: float) -> float:
    if v < lo:
        return lo
    if v > hi:
        return hi
    return v
