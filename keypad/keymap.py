"""Keyboard keys mapped onto engine entry points"""
from dataclasses import dataclass
from typing import Callable

from keypad.engine import Engine
from keypad.tokens import OPERATOR_CHARS, Operator

KeyHandler = Callable[[Engine], None]


@dataclass
class KeymapError(Exception):
    errmsg: str
    keys: str
    error_key_idx: int

    def __str__(self) -> str:
        print_start_idx = max(0, self.error_key_idx - 10)
        print_ellipsis_pre = print_start_idx > 0
        print_end_idx = min(len(self.keys), self.error_key_idx + 10)
        print_ellipsis_post = print_end_idx < len(self.keys)
        return "\n".join(
            [
                f"[Keymap error] {self.errmsg}",
                (
                    ("..." if print_ellipsis_pre else "")
                    + f"{self.keys[print_start_idx:print_end_idx]}"
                    + ("..." if print_ellipsis_post else "")
                ),
                " " * (self.error_key_idx - print_start_idx + (3 if print_ellipsis_pre else 0)) + "^",
            ]
        )


def _digit(digit: str) -> KeyHandler:
    return lambda engine: engine.on_digit(digit)


def _operator(op: Operator) -> KeyHandler:
    return lambda engine: engine.on_operator(op)


KEY_BINDINGS: dict[str, KeyHandler] = {
    **{digit: _digit(digit) for digit in "0123456789"},
    **{char: _operator(op) for char, op in OPERATOR_CHARS.items()},
    ".": Engine.on_dot,
    ",": Engine.on_dot,
    "=": Engine.on_equals,
    "Enter": Engine.on_equals,
    "%": Engine.on_percent,
    "Backspace": Engine.on_backspace,
    "Escape": Engine.on_clear_all,
    "c": Engine.on_clear,
    "n": Engine.on_toggle_sign,
    "±": Engine.on_toggle_sign,
}


def press(engine: Engine, key: str) -> None:
    handler = KEY_BINDINGS.get(key)
    if handler is None:
        raise KeymapError(f"Unbound key: {key!r}", keys=key, error_key_idx=0)
    handler(engine)


def type_keys(engine: Engine, keys: str) -> None:
    """Presses every character of keys in order; whitespace is skipped

    >>> engine = Engine()
    >>> type_keys(engine, "2+3*4=")
    >>> engine.display_text
    '14'
    """
    for i, key in enumerate(keys):
        if key.isspace():
            continue
        handler = KEY_BINDINGS.get(key)
        if handler is None:
            raise KeymapError(f"Unbound key: {key!r}", keys=keys, error_key_idx=i)
        handler(engine)


def press_all(engine: Engine, keys: list[str]) -> None:
    for key in keys:
        press(engine, key)
