"""Turning numbers, tokens and session state into display text

Nothing here mutates state; the engine decides what to show, these functions
decide how it looks within the display width.
"""
import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import TYPE_CHECKING

from keypad.config import settings
from keypad.tokens import Number, Operator, Percent, Token, is_percent_entry
from keypad.utils import trim_trailing_zeros

if TYPE_CHECKING:
    from keypad.engine import Session

# enough to hold the exact expansion of any double
_EXACT_PRECISION = 1100


def format_number(value: float) -> str:
    """Shortest round-trip numeral; positional for 1e-7 <= |value| < 1e21, exponent form outside

    >>> format_number(2.0), format_number(0.1 + 0.2), format_number(1.5e-7), format_number(1e21)
    ('2', '0.30000000000000004', '1.5e-7', '1e+21')
    """
    if value == 0:
        return "0"
    shortest = Decimal(repr(value))
    magnitude = shortest.adjusted()
    if -7 < magnitude < 21:
        return trim_trailing_zeros(format(shortest, "f"))
    sign, digits, _ = shortest.normalize().as_tuple()
    coefficient = "".join(str(d) for d in digits)
    mantissa = coefficient[0] + ("." + coefficient[1:] if len(coefficient) > 1 else "")
    return f"{'-' if sign else ''}{mantissa}e{magnitude:+d}"


def _to_fixed(value: float, places: int) -> str:
    with localcontext() as ctx:
        ctx.prec = _EXACT_PRECISION
        rounded = Decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    return trim_trailing_zeros(format(rounded, "f"))


def _to_exponential(value: float, places: int) -> str:
    with localcontext() as ctx:
        ctx.prec = _EXACT_PRECISION
        exact = Decimal(value)
        quantum = Decimal(1).scaleb(-places)
        exponent = exact.adjusted()
        mantissa = exact.scaleb(-exponent).quantize(quantum, rounding=ROUND_HALF_UP)
        if abs(mantissa) >= 10:
            # 9.99...e+N rounded up to 10.0e+N
            exponent += 1
            mantissa = exact.scaleb(-exponent).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{mantissa}e{exponent:+d}"


def _fit_exponential(value: float, max_length: int) -> str:
    sign_length = 1 if value < 0 else 0
    exponent_length = len(f"e{Decimal(value).adjusted():+d}")
    # sign, leading digit and point come before the fractional digits
    places = max(0, max_length - sign_length - 2 - exponent_length)
    text = _to_exponential(value, places)
    while len(text) > max_length and places > 0:
        places -= 1
        text = _to_exponential(value, places)
    # a bare "de+NNN" may still be over the width; it is returned anyway
    return text


def format_for_display(value: float, max_length: int | None = None, error_text: str | None = None) -> str:
    """max_length and error_text default to the global settings"""
    max_length = max_length or settings.max_display_length
    error_text = error_text or settings.error_text
    if not math.isfinite(value):
        return error_text

    text = format_number(value)
    if len(text) <= max_length:
        return text

    if "." in text:
        integer_part = text.split(".", 1)[0]
        free = max_length - len(integer_part) - 1
        if free <= 0:
            return integer_part[:max_length]
        rounded = _to_fixed(value, free)
        if len(rounded) <= max_length and Decimal(rounded) != 0:
            return rounded

    return _fit_exponential(value, max_length)


def format_token(token: Token) -> str:
    if isinstance(token, Number):
        return format_number(token.value)
    elif isinstance(token, Percent):
        return format_number(token.value) + "%"
    elif isinstance(token, Operator):
        return token.glyph
    else:
        raise TypeError(f"Unexpected token: {token!r}")


def format_expression(tokens: list[Token]) -> str:
    """[2, ADD, 3, MUL, 4] => 2 + 3 × 4"""
    return " ".join(format_token(token) for token in tokens)


def format_live_text(session: "Session") -> str:
    if session.pending_operator is None:
        return session.current_entry

    parts = [format_token(token) for token in session.tokens]
    if session.awaiting_operand:
        if session.tokens and isinstance(session.tokens[-1], Operator):
            parts[-1] = session.pending_operator.glyph
        else:
            parts.append(session.pending_operator.glyph)
    else:
        parts.append(session.current_entry)
    return " ".join(parts)


def wrap_for_presentation(text: str, is_showing_result: bool, error_text: str | None = None) -> str:
    """Negative numbers are parenthesized while typed and bare once they are a result

    Negative percent literals are always parenthesized: -10% => (-10%)
    """
    error_text = error_text or settings.error_text
    text = text.strip()
    if text == error_text or " " in text:
        return text
    if is_percent_entry(text):
        return f"({text})" if text.startswith("-") else text
    if text.startswith("-") and not is_showing_result:
        return f"({text})"
    return text
