# file: amounts.py
import re
from decimal import Decimal, InvalidOperation, getcontext

from errors import InvalidAmount

# Plain decimal or scientific notation, ASCII digits only. No whitespace, NaN or Infinity.
_DECIMAL_RE = re.compile(r'[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?')


def parse_decimal(text: str, field: str) -> Decimal:
    """Парсит строку в точный Decimal, иначе бросает InvalidAmount с именем поля."""
    if not _DECIMAL_RE.fullmatch(text or ""):
        raise InvalidAmount(field, text)
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise InvalidAmount(field, text)

    # Decimal() ignores the context, so huge exponents only blow up in later arithmetic.
    ctx = getcontext()
    if not value.is_finite() or (value and not ctx.Emin <= value.adjusted() <= ctx.Emax):
        raise InvalidAmount(field, text, "exponent out of range")
    return value
