import enum
import math
import re
from dataclasses import dataclass

from keypad.utils import PrintableEnum


@dataclass
class EntryError(Exception):
    errmsg: str
    entry: str
    error_char_idx: int

    def __str__(self) -> str:
        return "\n".join(
            [
                f"[Entry error] {self.errmsg}",
                self.entry,
                " " * self.error_char_idx + "^",
            ]
        )


class Operator(PrintableEnum):
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()

    @property
    def glyph(self) -> str:
        return OPERATOR_GLYPHS[self]

    @property
    def is_multiplicative(self) -> bool:
        return self in (Operator.MUL, Operator.DIV)

    @classmethod
    def parse(cls, name: str) -> "Operator":
        """Accepts enum names in any case, display glyphs and ASCII operator characters"""
        by_name = cls.__members__.get(name.upper())
        if by_name is not None:
            return by_name
        by_char = OPERATOR_CHARS.get(name)
        if by_char is None:
            raise ValueError(f"Unknown operator: {name!r}")
        return by_char


OPERATOR_GLYPHS = {
    Operator.ADD: "+",
    Operator.SUB: "−",
    Operator.MUL: "×",
    Operator.DIV: "÷",
}

OPERATOR_CHARS = {
    **{glyph: op for op, glyph in OPERATOR_GLYPHS.items()},
    "-": Operator.SUB,
    "*": Operator.MUL,
    "/": Operator.DIV,
}


@dataclass(frozen=True)
class Number:
    value: float

    def __str__(self) -> str:
        return f"<NUMBER>{self.value}"


@dataclass(frozen=True)
class Percent:
    """Percent literal; value is the typed magnitude, not yet divided by 100"""

    value: float

    def __str__(self) -> str:
        return f"<PERCENT>{self.value}"


Value = Number | Percent
Token = Number | Percent | Operator


# what the user is currently typing, parsed once per inspection


@dataclass(frozen=True)
class PlainNumber:
    value: float


@dataclass(frozen=True)
class PartialNumber:
    """Unfinished numeral like '12.', '-' or '1.5e-', committed as its lenient value"""

    text: str

    @property
    def value(self) -> float:
        return _lenient_float(self.text)


@dataclass(frozen=True)
class PercentLiteral:
    value: float


ParsedEntry = PlainNumber | PartialNumber | PercentLiteral


_ENTRY_PATT = re.compile(r"-?\d*(?:\.\d*)?(?:e[+-]?\d*)?%?")
_PARTIAL_PATT = re.compile(r"(-?\.?|.*[.e+-])")


def _lenient_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def parse_entry(entry: str) -> ParsedEntry:
    match = _ENTRY_PATT.match(entry)
    if match is None or match.end() != len(entry):
        error_idx = match.end() if match is not None else 0
        raise EntryError(f"Unexpected character {entry[error_idx]!r}", entry=entry, error_char_idx=error_idx)

    if entry.endswith("%"):
        return PercentLiteral(_lenient_float(entry[:-1]))
    if _PARTIAL_PATT.fullmatch(entry):
        return PartialNumber(entry)
    return PlainNumber(_lenient_float(entry))


def is_percent_entry(entry: str) -> bool:
    return entry.endswith("%")


def entry_to_token(entry: str) -> Value:
    parsed = parse_entry(entry)
    if isinstance(parsed, PercentLiteral):
        return Percent(parsed.value)
    return Number(parsed.value)
