import math
import random
import warnings

from keypad.evaluator import evaluate
from keypad.formatting import format_number
from keypad.tokens import Number, Operator, Token

warnings.filterwarnings("ignore")

PY_OPERATORS = {
    Operator.ADD: "+",
    Operator.SUB: "-",
    Operator.MUL: "*",
    Operator.DIV: "/",
}


def eval_py(tokens: list[Token]) -> float | str:
    code = " ".join(PY_OPERATORS[t] if isinstance(t, Operator) else f"({format_number(t.value)})" for t in tokens)
    try:
        return float(eval(code))
    except Exception as e:
        return str(e)


def eval_my(tokens: list[Token]) -> float | str:
    result = evaluate(tokens)
    return result.value if result.ok and result.value is not None else "invalid result"


if __name__ == "__main__":
    operators = list(Operator)

    def generate(length: int) -> list[Token]:
        tokens: list[Token] = [Number(float(random.randint(-50, 50)))]
        for _ in range(length):
            tokens.append(random.choice(operators))
            tokens.append(Number(float(random.randint(-50, 50))))
        return tokens

    while True:
        tokens = generate(random.randint(0, 5))

        res_py = eval_py(tokens)
        res_my = eval_my(tokens)
        if isinstance(res_py, float) and isinstance(res_my, float) and math.isclose(res_my, res_py):
            continue
        if isinstance(res_py, str) and isinstance(res_my, str):
            continue
        print(f"{' '.join(str(t) for t in tokens)}\npy: {res_py}\nmy: {res_my}\n\n")
