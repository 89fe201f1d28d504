from __future__ import annotations

import argparse
import queue
import sys
import threading
from pathlib import Path

from mousetotouch.core.config import ConfigError, PRESETS, apply_overrides, get_preset, load_profile
from mousetotouch.core.control import ModeController
from mousetotouch.core.types import ModeState, ScreenGeometry
from mousetotouch.injector.playback import RecordingExecutor
from mousetotouch.interpreter.pipeline import Pipeline
from mousetotouch.runtime.kill_switch import KillSwitch
from mousetotouch.runtime.run_loop import ROTATE, run


def parse_screen(text: str) -> ScreenGeometry:
    try:
        w, h = text.lower().split("x", 1)
        return ScreenGeometry(int(w), int(h))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {text!r}")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Mouse -> touchscreen swipe and pinch gestures (Linux uinput)")
    ap.add_argument("device", nargs="?", help="/dev/input/eventN of the mouse (default: auto-detect)")
    ap.add_argument("--preset", choices=[p.value for p in PRESETS], default="Default")
    ap.add_argument("--profile", type=Path, default=None, help="JSON tuning profile (default ~/.config/mousetotouch/profile.json)")
    ap.add_argument("--screen", type=parse_screen, default=ScreenGeometry(1920, 1080), help="Touchscreen size, e.g. 1080x2400")
    ap.add_argument("--threshold-px", type=float, default=None, help="Movement threshold in pixels")
    ap.add_argument("--throttle-ms", type=int, default=None, help="Minimum time between gestures")
    ap.add_argument("--zoom-gap-px", type=float, default=None)
    ap.add_argument("--zoom-travel-px", type=float, default=None)
    ap.add_argument("--frame-ms", type=int, default=8, help="Touch playback frame interval")
    ap.add_argument("--start-active", action="store_true", help="Start translating immediately")
    ap.add_argument("--no-tray", action="store_true", help="Hotkeys only")
    ap.add_argument("--no-hotkeys", action="store_true")
    ap.add_argument("--dry-run", action="store_true", help="Log gestures instead of injecting them")
    ap.add_argument("--verbose", action="store_true")
    return ap


def resolve_preset(args: argparse.Namespace):
    preset = get_preset(args.preset)
    profile = load_profile(args.profile)
    if profile:
        preset = apply_overrides(preset, profile)
        print("[Config] loaded profile overrides")
    return apply_overrides(preset, {
        "threshold_px": args.threshold_px,
        "throttle_ms": args.throttle_ms,
        "zoom_gap_px": args.zoom_gap_px,
        "zoom_travel_px": args.zoom_travel_px,
    })


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        preset = resolve_preset(args)
    except ConfigError as e:
        print(f"[Config] {e}", file=sys.stderr)
        return 2

    geometry = args.screen
    control = ModeController()
    stop = threading.Event()
    # hotkey/tray threads post here; the run loop applies it between samples
    inbox: "queue.Queue" = queue.Queue()

    def rotate() -> None:
        inbox.put(ROTATE)

    if args.dry_run:
        executor = RecordingExecutor(verbose=True)
    else:
        from mousetotouch.injector.uinput_touch import UInputTouchscreen
        executor = UInputTouchscreen.create(geometry, frame_ms=args.frame_ms)

    from mousetotouch.sensor.evdev_pointer import EvdevPointerSource
    source = EvdevPointerSource.open(args.device, geometry)

    pipeline = Pipeline(preset, geometry, executor, control=control, verbose=args.verbose)
    ks = KillSwitch(pipeline=pipeline, source=source)

    print(f"[MouseToTouch] preset={preset.name.value} threshold={preset.movement.threshold_px}px "
          f"throttle={preset.throttle.interval_ms}ms screen={geometry.width}x{geometry.height}")

    if not args.no_hotkeys:
        # Hotkeys always-on (never dependent on tray)
        from mousetotouch.ui.hotkeys import describe, run_hotkeys
        threading.Thread(target=run_hotkeys, args=(control, rotate), daemon=True).start()
        print("  Hotkeys:")
        print(describe())

    if not args.no_tray:
        # Tray: best effort. If it is missing, keep hotkeys alive.
        try:
            from mousetotouch.ui.tray import run_tray
            threading.Thread(target=run_tray, args=(control, stop, rotate), daemon=True).start()
            print("  Tray: Mode/Stop / Emergency stop / Rotate screen / Quit")
        except Exception as e:
            print(f"[MouseToTouch] Tray unavailable: {e}. Hotkeys only.")

    if args.start_active and control.state == ModeState.IDLE:
        control.toggle()

    print("[MouseToTouch] running. Hold left button to swipe, right button + up/down to zoom. Ctrl+C to exit.")
    try:
        run(pipeline, ks, source.samples(), stop=stop, inbox=inbox)
    except KeyboardInterrupt:
        print("\n[MouseToTouch] exiting")
    finally:
        source.close()
        executor.close()
        print(f"[MouseToTouch] {pipeline.dispatched} gestures dispatched")
    return 0


if __name__ == "__main__":
    sys.exit(main())
