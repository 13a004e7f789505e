from enum import Enum


class SignalKind(str, Enum):
    VISIBILITY_CHANGE = "visibilitychange"
    BLUR = "blur"
    FOCUS_REVEAL = "focus_reveal"
    VISIBILITY_POLL = "visibility_poll"
    FULLSCREEN_EXIT = "fullscreen_exit"
    CURSOR_LEAVE = "cursor_leave"
    DEVTOOLS_SHORTCUT = "devtools_shortcut"


DESCRIPTIONS = {
    SignalKind.VISIBILITY_CHANGE: "Tab switch or window blur detected",
    SignalKind.BLUR: "Window blur detected",
    SignalKind.FOCUS_REVEAL: "Tab switch detected on focus",
    SignalKind.VISIBILITY_POLL: "Tab visibility changed - possible tab switch",
    SignalKind.FULLSCREEN_EXIT: "Fullscreen exit detected",
    SignalKind.CURSOR_LEAVE: "Mouse left the browser window",
    SignalKind.DEVTOOLS_SHORTCUT: "Developer tools access attempted",
}


def is_restricted_shortcut(key: str, ctrl: bool = False, shift: bool = False) -> bool:
    """F12, Ctrl+Shift+I, Ctrl+Shift+J and Ctrl+U (view source)"""
    if key == "F12":
        return True
    if ctrl and shift and key.upper() in ("I", "J"):
        return True
    return ctrl and not shift and key.lower() == "u"
