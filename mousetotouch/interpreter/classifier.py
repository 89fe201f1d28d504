from __future__ import annotations

from mousetotouch.core.config import Preset
from mousetotouch.core.types import (
    Buttons, Delta,
    GestureIntent, NO_INTENT, ScrollIntent, ZoomIntent,
)


class IntentClassifier:
    """
    Delta + button mask -> NONE | SCROLL | ZOOM.

    Order matters:
      1. throttle gate (too soon after the last dispatch -> NONE)
      2. secondary button held -> zoom candidate, else scroll candidate
      3. zoom: vertical travel past threshold; up = zoom in, down = zoom out
      4. scroll: either axis past threshold
      5. anything else is jitter -> NONE
    """

    def __init__(self, preset: Preset) -> None:
        self.preset = preset

    @property
    def threshold_px(self) -> float:
        return self.preset.movement.threshold_px

    @property
    def throttle_ms(self) -> int:
        return self.preset.throttle.interval_ms

    def classify(self, delta: Delta, buttons: Buttons) -> GestureIntent:
        if delta.elapsed_ms is not None and delta.elapsed_ms < self.throttle_ms:
            return NO_INTENT

        dx, dy = delta.dx, delta.dy

        if buttons & Buttons.SECONDARY:
            # horizontal travel is ignored while zooming
            if abs(dy) > self.threshold_px:
                return ZoomIntent(zoom_in=dy < 0)
            return NO_INTENT

        if abs(dx) > self.threshold_px or abs(dy) > self.threshold_px:
            return ScrollIntent(
                from_x=delta.anchor_x,
                from_y=delta.anchor_y,
                to_x=delta.x,
                to_y=delta.y,
            )
        return NO_INTENT
