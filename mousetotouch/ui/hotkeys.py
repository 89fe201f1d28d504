from __future__ import annotations

from typing import Callable, Dict

from mousetotouch.core.control import ModeController


# pynput GlobalHotKeys syntax -> what it does
HOTKEYS = {
    "<ctrl>+<alt>+<space>": "toggle",
    "<ctrl>+<alt>+<esc>": "emergency stop",
    "<ctrl>+<alt>+r": "rotate screen",
}


def bindings(control: ModeController, rotate: Callable[[], None]) -> Dict[str, Callable[[], None]]:
    """
    Hotkey callbacks only flip shared state; the run loop's kill switch
    applies and logs the result on the pipeline thread.
    """
    actions = {
        "toggle": control.toggle,
        "emergency stop": control.emergency_stop,
        "rotate screen": rotate,
    }
    return {combo: actions[name] for combo, name in HOTKEYS.items()}


def describe() -> str:
    return "\n".join(f"   - {combo:<22} = {name}" for combo, name in HOTKEYS.items())


def run_hotkeys(control: ModeController, rotate: Callable[[], None]) -> None:
    """Blocks on a global listener (X11). Always on, independent of the tray."""
    from pynput import keyboard

    with keyboard.GlobalHotKeys(bindings(control, rotate)) as listener:
        listener.join()
