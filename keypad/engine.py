"""Calculator session state and the keypress state machine driving it"""
import enum
import functools
import math
from dataclasses import dataclass, field
from typing import Callable, Optional

import structlog

from keypad.config import Settings
from keypad.config import settings as default_settings
from keypad.evaluator import apply_operator, evaluate, extract_last_binary_op
from keypad.formatting import (
    format_expression,
    format_for_display,
    format_live_text,
    format_number,
    format_token,
    wrap_for_presentation,
)
from keypad.tokens import (
    EntryError,
    Number,
    Operator,
    Percent,
    PercentLiteral,
    Token,
    entry_to_token,
    is_percent_entry,
    parse_entry,
)
from keypad.utils import PrintableEnum

logger = structlog.get_logger()


@dataclass
class SessionInvariantError(Exception):
    errmsg: str
    session: "Session"

    def __str__(self) -> str:
        return f"[Invariant violated] {self.errmsg}\n{self.session}"


class State(PrintableEnum):
    ENTERING = enum.auto()
    OPERATOR_CHOSEN = enum.auto()
    ENTERING_SECOND = enum.auto()
    RESULT = enum.auto()
    ERROR = enum.auto()


@dataclass
class Session:
    current_entry: str = "0"
    tokens: list[Token] = field(default_factory=list)
    pending_operator: Optional[Operator] = None
    awaiting_operand: bool = False
    frozen_expression: str = ""
    last_operator: Optional[Operator] = None
    last_operand: Optional[float] = None
    is_showing_result: bool = False

    def reset(self) -> None:
        self.current_entry = "0"
        self.tokens.clear()
        self.pending_operator = None
        self.awaiting_operand = False
        self.frozen_expression = ""
        self.forget_repeat()
        self.is_showing_result = False

    def forget_repeat(self) -> None:
        self.last_operator = None
        self.last_operand = None

    def check_invariants(self, error_text: str) -> None:
        for i, token in enumerate(self.tokens):
            expects_operator = i % 2 == 1
            if isinstance(token, Operator) != expects_operator:
                raise SessionInvariantError(f"Token {i} ({token}) breaks value/operator alternation", self)

        if self.pending_operator is None:
            if self.tokens:
                raise SessionInvariantError("Committed tokens without a pending operator", self)
        elif not self.tokens or self.tokens[-1] is not self.pending_operator:
            raise SessionInvariantError("Pending operator is not the last committed token", self)

        if self.awaiting_operand and self.tokens and not isinstance(self.tokens[-1], Operator):
            raise SessionInvariantError("Awaiting an operand after a value token", self)

        if self.current_entry != error_text:
            try:
                parse_entry(self.current_entry)
            except EntryError as e:
                raise SessionInvariantError(str(e), self) from e


def _transition(method: Callable[..., None]) -> Callable[..., None]:
    @functools.wraps(method)
    def decorated(self: "Engine", *args) -> None:
        method(self, *args)
        logger.debug("Key", key=method.__name__, args=args, state=self.state, entry=self.session.current_entry)
        if self.settings.check_invariants:
            self.session.check_invariants(self.settings.error_text)

    return decorated


class Engine:
    """One calculator: feed it keys through the on_* methods, read back the display properties"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.session = Session()

    # read-only projections for the renderer

    @property
    def is_error(self) -> bool:
        return self.session.current_entry == self.settings.error_text

    @property
    def display_text(self) -> str:
        s = self.session
        return wrap_for_presentation(format_live_text(s), s.is_showing_result, self.settings.error_text)

    @property
    def expression_text(self) -> str:
        return self.session.frozen_expression

    @property
    def clear_button_label(self) -> str:
        entry = self.session.current_entry
        has_typed = entry != "0" or "." in entry or is_percent_entry(entry)
        return "C" if has_typed else "AC"

    @property
    def active_operator(self) -> Optional[Operator]:
        return self.session.pending_operator

    @property
    def state(self) -> State:
        s = self.session
        if self.is_error:
            return State.ERROR
        if s.pending_operator is not None:
            return State.OPERATOR_CHOSEN if s.awaiting_operand else State.ENTERING_SECOND
        if s.is_showing_result:
            return State.RESULT
        return State.ENTERING

    # typing

    def _begin_typing(self) -> None:
        self.session.is_showing_result = False
        self.session.frozen_expression = ""

    @_transition
    def on_digit(self, digit: str) -> None:
        if len(digit) != 1 or digit not in "0123456789":
            raise ValueError(f"Digit expected, got {digit!r}")
        s = self.session

        if self.is_error:
            s.reset()
            s.current_entry = digit
            return

        if is_percent_entry(s.current_entry) or s.awaiting_operand:
            s.current_entry = digit
            s.awaiting_operand = False
            self._begin_typing()
            return

        if len(s.current_entry) >= self.settings.max_input_length:
            return
        s.current_entry = digit if s.current_entry == "0" else s.current_entry + digit
        self._begin_typing()

    @_transition
    def on_dot(self) -> None:
        s = self.session
        if self.is_error or is_percent_entry(s.current_entry):
            return
        if s.awaiting_operand:
            s.current_entry = "0."
            s.awaiting_operand = False
            self._begin_typing()
            return
        if "." in s.current_entry or "e" in s.current_entry:
            return
        s.current_entry += "."
        self._begin_typing()

    @_transition
    def on_toggle_sign(self) -> None:
        s = self.session
        entry = s.current_entry
        if self.is_error or entry in ("0", "0."):
            return

        if is_percent_entry(entry):
            core = entry[:-1].strip()
            s.current_entry = (core[1:] if core.startswith("-") else "-" + core) + "%"
        else:
            s.current_entry = entry[1:] if entry.startswith("-") else "-" + entry
            if s.current_entry == "-0":
                s.current_entry = "0"

        if s.pending_operator is None:
            s.frozen_expression = ""
        s.is_showing_result = False

    @_transition
    def on_percent(self) -> None:
        s = self.session
        if self.is_error:
            return

        if s.pending_operator is not None and s.awaiting_operand:
            # "5 + %" turns the first operand into 5%
            first = s.tokens[-2]
            if not isinstance(first, (Number, Percent)):
                raise SessionInvariantError(f"Operand expected before the pending operator, found {first}", s)
            s.current_entry = format_number(first.value) + "%"
            s.tokens.clear()
            s.pending_operator = None
            s.awaiting_operand = False
            s.is_showing_result = False
            return

        if not is_percent_entry(s.current_entry):
            s.current_entry = s.current_entry.strip() + "%"
            s.is_showing_result = False
        max_length = self.settings.max_input_length
        if len(s.current_entry) > max_length:
            s.current_entry = s.current_entry[: max_length - 1] + "%"

    @_transition
    def on_backspace(self) -> None:
        s = self.session
        if self.is_error:
            return

        if s.awaiting_operand:
            if s.pending_operator is not None:
                # undo the operator; the operand before it becomes editable again
                s.tokens.pop()
                operand = s.tokens.pop()
                if entry_to_token(s.current_entry) != operand:
                    s.current_entry = format_token(operand)
                s.pending_operator = s.tokens[-1] if s.tokens else None
            s.awaiting_operand = False
            s.is_showing_result = False
            s.frozen_expression = ""
            return

        if is_percent_entry(s.current_entry):
            s.current_entry = s.current_entry[:-1]
        else:
            s.current_entry = s.current_entry[:-1]
            if s.current_entry in ("", "-", "-0"):
                s.current_entry = "0"
        self._begin_typing()

    # clearing

    @_transition
    def on_clear_entry(self) -> None:
        s = self.session
        s.current_entry = "0"
        s.forget_repeat()
        s.is_showing_result = False
        s.frozen_expression = ""

    @_transition
    def on_clear_all(self) -> None:
        self.session.reset()

    def on_clear(self) -> None:
        """C drops the second operand being typed, otherwise behaves as the label says (C or AC)"""
        s = self.session
        if s.pending_operator is not None and not s.awaiting_operand:
            self._clear_second_operand()
        elif self.clear_button_label == "C":
            self.on_clear_entry()
        else:
            self.on_clear_all()

    @_transition
    def _clear_second_operand(self) -> None:
        s = self.session
        s.current_entry = "0"
        s.awaiting_operand = True
        s.is_showing_result = False
        s.frozen_expression = ""

    # operators and evaluation

    @_transition
    def on_operator(self, op: Operator | str) -> None:
        if isinstance(op, str):
            op = Operator.parse(op)
        s = self.session
        if self.is_error:
            return

        s.is_showing_result = False
        if s.pending_operator is not None and s.awaiting_operand:
            s.pending_operator = op
            s.tokens[-1] = op
            return

        s.tokens.append(entry_to_token(s.current_entry))
        s.tokens.append(op)
        s.pending_operator = op
        s.awaiting_operand = True
        s.frozen_expression = ""
        s.forget_repeat()

    @_transition
    def on_equals(self) -> None:
        if self.is_error:
            return
        if self.session.pending_operator is None:
            self._equals_without_operator()
        else:
            self._equals_with_operator()

    def _show_result(self, value: float, expression: str) -> None:
        s = self.session
        s.current_entry = format_for_display(value, self.settings.max_display_length, self.settings.error_text)
        s.frozen_expression = expression
        s.awaiting_operand = True
        s.is_showing_result = True

    def _fail(self, expression: str) -> None:
        s = self.session
        s.frozen_expression = expression
        s.current_entry = self.settings.error_text
        s.tokens.clear()
        s.pending_operator = None
        s.awaiting_operand = False
        s.is_showing_result = False
        logger.info("Invalid result", expression=expression)

    def _equals_without_operator(self) -> None:
        s = self.session
        parsed = parse_entry(s.current_entry)

        if isinstance(parsed, PercentLiteral):
            # a lone percent has no left operand to be a percent of
            result = parsed.value / 100
            expression = f"{format_number(parsed.value)} %"
            s.forget_repeat()
            if not math.isfinite(result):
                self._fail(expression)
                return
            self._show_result(result, expression)
            return

        if s.last_operator is None or s.last_operand is None:
            return
        left = parsed.value
        result = apply_operator(left, s.last_operator, s.last_operand)
        expression = f"{format_number(left)} {s.last_operator.glyph} {format_number(s.last_operand)}"
        if not math.isfinite(result):
            self._fail(expression)
            return
        self._show_result(result, expression)

    def _equals_with_operator(self) -> None:
        s = self.session
        s.tokens.append(entry_to_token(s.current_entry))
        expression = format_expression(s.tokens)

        result = evaluate(s.tokens)
        if not result.ok or result.value is None:
            self._fail(expression)
            return

        repeat = extract_last_binary_op(s.tokens)
        s.last_operator = repeat.op if repeat is not None else None
        s.last_operand = repeat.operand if repeat is not None else None

        s.tokens.clear()
        s.pending_operator = None
        self._show_result(result.value, expression)
