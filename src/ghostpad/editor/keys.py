"""Keystrokes in a toolkit-neutral form.

Key names follow the browser ``KeyboardEvent.key`` convention: a printable
character is its own name, everything else has a word name ("Tab", "Enter",
"ArrowLeft", "F5").
"""

from __future__ import annotations

from dataclasses import dataclass

MODIFIER_KEYS = frozenset({"Shift", "Control", "Alt", "Meta"})
FUNCTION_KEYS = frozenset(f"F{n}" for n in range(1, 13))

_TEXTUAL_NAMES = {
    "tab": "Tab",
    "enter": "Enter",
    "backspace": "Backspace",
    "delete": "Delete",
    "escape": "Escape",
    "left": "ArrowLeft",
    "right": "ArrowRight",
    "up": "ArrowUp",
    "down": "ArrowDown",
    "home": "Home",
    "end": "End",
    "pageup": "PageUp",
    "pagedown": "PageDown",
    "insert": "Insert",
    "shift": "Shift",
    "ctrl": "Control",
    "alt": "Alt",
    "meta": "Meta",
}


@dataclass(frozen=True)
class KeyPress:
    key: str
    shift: bool = False
    ctrl: bool = False
    alt: bool = False

    @property
    def is_character(self) -> bool:
        """A plain printable character (no Ctrl/Alt chord)."""
        return len(self.key) == 1 and not (self.ctrl or self.alt)

    @property
    def is_shortcut(self) -> bool:
        return self.ctrl or self.alt


def is_modifier_key(key: str) -> bool:
    return key in MODIFIER_KEYS


def is_function_key(key: str) -> bool:
    return key in FUNCTION_KEYS


def from_textual(key: str, character: str | None = None) -> KeyPress | None:
    """Translate a Textual key event (``"shift+left"``, ``"f5"``, ``"a"``) to a KeyPress.

    Returns None for keys with no meaning to the editor.
    """
    if character is not None and len(character) == 1 and character.isprintable() and "ctrl+" not in key:
        return KeyPress(character)

    *modifiers, name = key.split("+")
    shift = "shift" in modifiers
    ctrl = "ctrl" in modifiers
    alt = "alt" in modifiers or "meta" in modifiers

    if name in _TEXTUAL_NAMES:
        return KeyPress(_TEXTUAL_NAMES[name], shift=shift, ctrl=ctrl, alt=alt)
    if len(name) > 1 and name[0] == "f" and name[1:].isdigit():
        return KeyPress(name.upper(), shift=shift, ctrl=ctrl, alt=alt)
    if len(name) == 1:
        return KeyPress(name, shift=shift, ctrl=ctrl, alt=alt)
    if name == "space":
        return KeyPress(" ", shift=shift, ctrl=ctrl, alt=alt)
    return None
