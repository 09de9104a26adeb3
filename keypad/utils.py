import enum


class PrintableEnum(enum.Enum):
    def __str__(self) -> str:
        return self.name

    __repr__ = __str__


def trim_trailing_zeros(text: str) -> str:
    """1.2300 => 1.23, 10. => 10, leaves exponent forms and integers alone"""
    if "." not in text or "e" in text:
        return text
    integer_part, fraction = text.split(".", 1)
    fraction = fraction.rstrip("0")
    return f"{integer_part}.{fraction}" if fraction else integer_part
