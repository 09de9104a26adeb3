import math
from dataclasses import dataclass
from typing import Callable, Optional

from keypad.tokens import Number, Operator, Percent, Token, Value

BinaryOperationImpl = Callable[[float, float], float]


@dataclass
class InvalidResultError(Exception):
    errmsg: str


@dataclass
class EvalResult:
    ok: bool
    value: Optional[float] = None


@dataclass
class RepeatOperation:
    """Operator and already-resolved right operand replayed by repeated '='"""

    op: Operator
    operand: float


def _div(a: float, b: float) -> float:
    return math.nan if b == 0 else a / b


operator_impls: dict[Operator, BinaryOperationImpl] = {
    Operator.ADD: lambda a, b: a + b,
    Operator.SUB: lambda a, b: a - b,
    Operator.MUL: lambda a, b: a * b,
    Operator.DIV: _div,
}


def apply_operator(a: float, op: Operator, b: float) -> float:
    return operator_impls[op](a, b)


def resolve_percent_operand(left: float, op: Operator, right: Value) -> float:
    """Percent is 'of the left operand' for + and -, a plain fraction for * and /

    100 + 10% => 110, 100 * 10% => 10
    """
    if isinstance(right, Number):
        return right.value
    elif isinstance(right, Percent):
        if op.is_multiplicative:
            return right.value / 100
        return left * (right.value / 100)
    else:
        raise TypeError(f"Unexpected operand: {right}")


def resolve_value(value: Value) -> float:
    return resolve_percent_operand(0.0, Operator.ADD, value)


def _split(tokens: list[Token]) -> tuple[list[Value | float], list[Operator]]:
    values: list[Value | float] = []
    operators: list[Operator] = []
    expect_value = True
    for token in tokens:
        if expect_value and isinstance(token, (Number, Percent)):
            values.append(token)
            expect_value = False
        elif not expect_value and isinstance(token, Operator):
            operators.append(token)
            expect_value = True
    if len(operators) == len(values) and operators:
        operators.pop()  # dangling "2 +"
    return values, operators


def _as_left(value: Value | float) -> float:
    return value if isinstance(value, float) else resolve_value(value)


def _reduce_at(values: list[Value | float], operators: list[Operator], i: int) -> None:
    left = _as_left(values[i])
    op = operators[i]
    right = values[i + 1]
    right_value = right if isinstance(right, float) else resolve_percent_operand(left, op, right)
    result = apply_operator(left, op, right_value)
    if not math.isfinite(result):
        raise InvalidResultError(f"{left} {op.glyph} {right_value} is not a finite number")
    values[i : i + 2] = [result]
    del operators[i]


def evaluate(tokens: list[Token]) -> EvalResult:
    values, operators = _split(tokens)
    if not values:
        return EvalResult(ok=True, value=0.0)

    try:
        i = 0
        while i < len(operators):
            if operators[i].is_multiplicative:
                _reduce_at(values, operators, i)
            else:
                i += 1
        while operators:
            _reduce_at(values, operators, 0)
    except InvalidResultError:
        return EvalResult(ok=False)

    result = _as_left(values[0])
    if not math.isfinite(result):
        return EvalResult(ok=False)
    return EvalResult(ok=True, value=result)


def extract_last_binary_op(tokens: list[Token]) -> Optional[RepeatOperation]:
    for i in range(len(tokens) - 2, 0, -1):
        op = tokens[i]
        if not isinstance(op, Operator):
            continue
        left, right = tokens[i - 1], tokens[i + 1]
        if isinstance(left, Operator) or isinstance(right, Operator):
            return None
        left_value = resolve_value(left)
        return RepeatOperation(op=op, operand=resolve_percent_operand(left_value, op, right))
    return None
