"""Fixed-point asset conversion.

Rates are USD prices scaled by 1e8 and amounts are in 1e-8 units, so a
conversion is a pure integer operation. Python ints are unbounded; the int64
ceiling is enforced explicitly to match the ledger's accounting range.
"""

from decimal import Decimal

_INT64_MAX = 2**63 - 1
_INT64_MIN = -(2**63)

PRECISION = 10**8  # smallest unit per whole token


class ConversionError(ValueError):
    """Raised when an amount cannot be converted at the given rates."""


def convert(amount: int, from_rate: int, to_rate: int) -> int:
    """Convert ``amount`` of an asset priced ``from_rate`` into one priced ``to_rate``.

    Computes ``amount * from_rate / to_rate`` truncated toward zero.

    Raises:
        ConversionError: On a zero rate or a result outside the int64 range.
    """
    if from_rate == 0 or to_rate == 0:
        raise ConversionError("invalid rate of 0")
    num = amount * from_rate
    # truncate toward zero like a big-int quotient, not toward -inf
    result = abs(num) // to_rate
    if num < 0:
        result = -result
    if not _INT64_MIN <= result <= _INT64_MAX:
        raise ConversionError("integer overflow")
    return result


def to_decimal(amount: int) -> Decimal:
    """Render a fixed-point amount as a whole-token Decimal (exact)."""
    return Decimal(amount) / Decimal(PRECISION)
