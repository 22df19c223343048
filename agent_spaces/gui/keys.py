"""Translate Tk key events into terminal input.

Kept free of tkinter imports so it can be exercised without a display.
"""

from __future__ import annotations

SHIFT_MASK = 0x1
CTRL_MASK = 0x4
# Alt is Mod1 on X11 and a high bit on Windows.
ALT_MASKS = 0x8 | 0x20000

_SEQUENCES = {
    "Return": "\r",
    "KP_Enter": "\r",
    "BackSpace": "\x7f",
    "Tab": "\t",
    "ISO_Left_Tab": "\x1b[Z",
    "Escape": "\x1b",
    "Up": "\x1b[A",
    "Down": "\x1b[B",
    "Right": "\x1b[C",
    "Left": "\x1b[D",
    "Home": "\x1b[H",
    "End": "\x1b[F",
    "Insert": "\x1b[2~",
    "Delete": "\x1b[3~",
    "Prior": "\x1b[5~",
    "Next": "\x1b[6~",
    "F1": "\x1bOP",
    "F2": "\x1bOQ",
    "F3": "\x1bOR",
    "F4": "\x1bOS",
}

_MODIFIER_KEYSYMS = {
    "Shift_L", "Shift_R", "Control_L", "Control_R", "Alt_L", "Alt_R",
    "Meta_L", "Meta_R", "Super_L", "Super_R", "Caps_Lock", "Num_Lock",
}

_CTRL_SYMBOLS = {
    "space": "\x00",
    "at": "\x00",
    "bracketleft": "\x1b",
    "backslash": "\x1c",
    "bracketright": "\x1d",
    "asciicircum": "\x1e",
    "underscore": "\x1f",
}


def is_app_shortcut(keysym: str, state: int) -> bool:
    """True for window-level shortcuts the terminal must not swallow."""
    ctrl = bool(state & CTRL_MASK)
    alt = bool(state & ALT_MASKS)
    shift = bool(state & SHIFT_MASK)
    if not ctrl:
        return False
    if alt and keysym in ("Left", "Right"):
        return True
    if shift and keysym in ("N", "n"):
        return True
    if keysym in ("comma",):
        return True
    if not shift and keysym in ("t", "T"):
        return True
    # Ctrl+Shift+C / Ctrl+Shift+V stay with the text widget for copy/paste.
    if shift and keysym in ("C", "c", "V", "v"):
        return True
    return False


def translate_key(keysym: str, char: str, state: int) -> str | None:
    """Return the byte sequence for one key press, or None to ignore it."""
    if keysym in _MODIFIER_KEYSYMS:
        return None
    ctrl = bool(state & CTRL_MASK)
    alt = bool(state & ALT_MASKS)

    if keysym in _SEQUENCES:
        sequence = _SEQUENCES[keysym]
        return "\x1b" + sequence if alt and len(sequence) == 1 else sequence

    if ctrl:
        if keysym in _CTRL_SYMBOLS:
            return _CTRL_SYMBOLS[keysym]
        if len(keysym) == 1 and keysym.isalpha():
            return chr(ord(keysym.lower()) & 0x1F)
        return None

    if not char:
        return None
    return "\x1b" + char if alt else char
