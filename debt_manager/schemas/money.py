from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Annotated

from pydantic import BeforeValidator, PlainSerializer


CENTS = Decimal("0.01")


def _to_decimal(value) -> Decimal:
    if value is None or (isinstance(value, str) and not value.strip()):
        return Decimal("0.00")
    if isinstance(value, bool):
        raise ValueError("totalDebt must be a number")

    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValueError("totalDebt must be a number") from e

    if not amount.is_finite():
        raise ValueError("totalDebt must be a finite number")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_money(value) -> Decimal:
    """Coerce a number or numeric string to a non-negative, 2-place Decimal.

    None and blank strings become zero.
    """
    amount = _to_decimal(value)
    if amount < 0:
        raise ValueError("totalDebt must not be negative")
    return amount


def to_stored_amount(value) -> Decimal:
    """Like `to_money` but accepts negative amounts already in the table."""
    return _to_decimal(value)


_as_json_number = PlainSerializer(float, return_type=float, when_used="json")

# Incoming amounts: create/update bodies and the client form.
Money = Annotated[Decimal, BeforeValidator(to_money), _as_json_number]

# Outgoing amounts: whatever the table holds, legacy negative rows included.
StoredAmount = Annotated[Decimal, BeforeValidator(to_stored_amount), _as_json_number]
