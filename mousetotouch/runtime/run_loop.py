from __future__ import annotations

import queue
import threading
from typing import Iterable, Optional, Protocol, Union

from mousetotouch.core.types import PointerSample, ScreenGeometry
from mousetotouch.interpreter.pipeline import Pipeline
from mousetotouch.runtime.kill_switch import KillSwitch


_POLL_S = 0.05

# inbox item: swap width and height of the current screen
ROTATE = "rotate"

InboxItem = Union[PointerSample, ScreenGeometry, str, None]


class Resizable(Protocol):
    def set_geometry(self, geometry: ScreenGeometry) -> None: ...


def apply_geometry(pipeline: Pipeline, geometry: ScreenGeometry, source: Optional[Resizable] = None) -> None:
    """Rotation / resize: core bounds, cursor clamp and touchscreen axes move together."""
    pipeline.set_geometry(geometry)
    pipeline.executor.set_geometry(geometry)
    if source is not None:
        source.set_geometry(geometry)
    print(f"[MouseToTouch] screen {geometry.width}x{geometry.height}")


def pump(samples: Iterable[PointerSample], q: "queue.Queue[InboxItem]") -> None:
    """Reader thread: the only sample producer. None marks end of input."""
    try:
        for s in samples:
            q.put(s)
    except OSError as err:
        print(f"[Sensor] input device lost: {err}")
    finally:
        q.put(None)


def run(pipeline: Pipeline, ks: KillSwitch, samples: Iterable[PointerSample],
        stop: Optional[threading.Event] = None,
        inbox: Optional["queue.Queue[InboxItem]"] = None) -> None:
    """
    Single consumer: every sample goes guard() -> on_sample() on this thread.
    Other threads may post a ScreenGeometry or ROTATE into inbox; those are
    applied here too, between samples.
    Returns when input ends or stop is set.
    """
    stop = stop or threading.Event()
    q = inbox if inbox is not None else queue.Queue()
    reader = threading.Thread(target=pump, args=(samples, q), name="pointer-reader", daemon=True)
    reader.start()

    try:
        while not stop.is_set():
            # mode changes from hotkeys/tray land here even with no pointer traffic
            ks.guard()
            try:
                item = q.get(timeout=_POLL_S)
            except queue.Empty:
                continue
            if item is None:
                break
            if item == ROTATE:
                g = pipeline.geometry
                apply_geometry(pipeline, ScreenGeometry(g.height, g.width), ks.source)
            elif isinstance(item, ScreenGeometry):
                apply_geometry(pipeline, item, ks.source)
            else:
                ks.guard()
                pipeline.on_sample(item)
    finally:
        # Always release the pointer on exit
        pipeline.emergency_stop()
        ks.guard()
