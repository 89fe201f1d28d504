from __future__ import annotations

from typing import Callable, Optional

from mousetotouch.core.clock import monotonic_ms
from mousetotouch.core.config import Preset
from mousetotouch.core.control import ModeController
from mousetotouch.core.types import (
    Buttons, GestureRequest, IntentKind, ModeState,
    Phase, PointerSample, ScreenGeometry,
)
from mousetotouch.interpreter.classifier import IntentClassifier
from mousetotouch.interpreter.synthesizer import GestureExecutor, GestureSynthesizer
from mousetotouch.interpreter.tracker import PointerTracker


class Pipeline:
    """
    Deterministic MouseToTouch pipeline.
    PointerSample -> (mode gate) -> tracker -> classifier -> synthesizer -> executor.

    Not re-entrant: the host feeds samples from one thread.
    Control signals may come from any thread (the controller is locked).
    """

    def __init__(
        self,
        preset: Preset,
        geometry: ScreenGeometry,
        executor: GestureExecutor,
        control: Optional[ModeController] = None,
        clock: Callable[[], int] = monotonic_ms,
        verbose: bool = False,
    ) -> None:
        self.preset = preset
        self.geometry = geometry
        self.executor = executor
        self.control = control if control is not None else ModeController()
        self.clock = clock
        self.verbose = verbose

        self.tracker = PointerTracker()
        self.classifier = IntentClassifier(preset)
        self.synthesizer = GestureSynthesizer(preset)

        self.dispatched = 0

    # ---- control signals ----

    def toggle(self) -> ModeState:
        state = self.control.toggle()
        if state == ModeState.IDLE:
            self._halt()
        return state

    def emergency_stop(self) -> ModeState:
        state = self.control.emergency_stop()
        self._halt()
        return state

    def _halt(self) -> None:
        # drop the anchor and anything not yet playing; a gesture in flight may finish
        self.tracker.reset()
        self.executor.cancel_pending()

    def is_active(self) -> bool:
        return self.control.is_active()

    def set_geometry(self, geometry: ScreenGeometry) -> None:
        # rotation / resize: new gestures use the new bounds immediately
        self.geometry = geometry

    # ---- input feed ----

    def feed(self, phase: Phase, x: float, y: float, buttons: Buttons = Buttons.NONE) -> Optional[GestureRequest]:
        """Convenience entry for hosts without their own timestamps."""
        return self.on_sample(PointerSample(x=x, y=y, buttons=buttons, phase=phase, t_ms=self.clock()))

    def on_sample(self, sample: PointerSample) -> Optional[GestureRequest]:
        # kill switch first: IDLE drops the sample with no side effect
        if not self.control.is_active():
            return None

        delta = self.tracker.on_sample(sample)
        if delta is None:
            return None

        intent = self.classifier.classify(delta, sample.buttons)
        if intent.kind == IntentKind.NONE:
            return None

        req = None
        try:
            req = self.synthesizer.submit(intent, self.geometry, self.executor)
        except Exception as e:
            # a single failed dispatch must not take the pipeline down
            print(f"[Gesture] dispatch failed: {e}")
        else:
            if req is not None:
                self.dispatched += 1
                if self.verbose:
                    print(f"[Gesture] {req.kind.value} {[s.points for s in req.strokes]}")

        # continuous re-basing: next delta starts here, even if clamping dropped the stroke
        self.tracker.rebase(sample.x, sample.y, sample.t_ms)
        return req
