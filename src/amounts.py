"""
Fixed-point amount helpers.

Every balance is a Decimal with exactly DECIMAL_PLACES fractional digits and a
magnitude no larger than MAX_AMOUNT (a 96-bit mantissa at that scale). All
arithmetic goes through LEDGER_CONTEXT, whose precision is wide enough that an
in-range add or subtract is always exact.
"""
from decimal import Context, Decimal, Inexact, InvalidOperation

DECIMAL_PLACES = 4
# 29 significant digits is the widest in-range value; the sum of two of them needs 30.
LEDGER_CONTEXT = Context(prec=40, traps=[InvalidOperation, Inexact])

AMOUNT_QUANTUM = Decimal(1).scaleb(-DECIMAL_PLACES)
MAX_AMOUNT = Decimal(2**96 - 1).scaleb(-DECIMAL_PLACES, LEDGER_CONTEXT)
ZERO = Decimal(0).quantize(AMOUNT_QUANTUM)


class AmountOverflowError(ArithmeticError):
    pass


def fractional_digits(value: Decimal) -> int:
    exponent = value.as_tuple().exponent
    return max(0, -exponent)


def in_range(value: Decimal) -> bool:
    return value.copy_abs() <= MAX_AMOUNT


def rescale(value: Decimal) -> Decimal:
    """
    Return ``value`` with exactly DECIMAL_PLACES fractional digits.
    Raises AmountOverflowError when the value is out of range, and
    decimal.Inexact when it would need rounding.
    """
    if not in_range(value):
        raise AmountOverflowError(f"amount {value} out of range")
    return LEDGER_CONTEXT.quantize(value, AMOUNT_QUANTUM)


def _checked(result: Decimal) -> Decimal:
    if not in_range(result):
        raise AmountOverflowError(f"result {result} out of range")
    return result


def checked_add(left: Decimal, right: Decimal) -> Decimal:
    return _checked(LEDGER_CONTEXT.add(left, right))


def checked_sub(left: Decimal, right: Decimal) -> Decimal:
    return _checked(LEDGER_CONTEXT.subtract(left, right))


def difference(left: Decimal, right: Decimal) -> Decimal:
    """Exact ``left - right`` without a range check."""
    return LEDGER_CONTEXT.subtract(left, right)


def format_amount(value: Decimal) -> str:
    """Render with exactly DECIMAL_PLACES fractional digits, never in exponent form."""
    return f"{LEDGER_CONTEXT.quantize(value, AMOUNT_QUANTUM):f}"
