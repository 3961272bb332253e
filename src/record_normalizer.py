import logging
import re
from decimal import Decimal, Inexact, InvalidOperation
from typing import Mapping, Optional

from amounts import AmountOverflowError, DECIMAL_PLACES, fractional_digits, rescale
from models import Operation, Transaction, TransactionMod, TransactionState, TransactionType

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

FIELDS = ("type", "client", "tx", "amount")

# ids and amounts are plain ASCII digits: no sign, exponent, or digit separators
_AMOUNT_PATTERN = re.compile(r"[0-9]+(?:\.[0-9]+)?")

_MOD_TARGETS = {
    TransactionType.DISPUTE: TransactionState.DISPUTED,
    TransactionType.RESOLVE: TransactionState.RESOLVED,
    TransactionType.CHARGEBACK: TransactionState.CHARGEBACK,
}


class InvalidRecordError(ValueError):
    pass


def parse_operation(row: Mapping[str, Optional[str]]) -> Operation:
    """
    Turn one trimmed input row into an Operation.

    Expects the keys ``type``, ``client``, ``tx`` and ``amount`` with string
    values; an empty ``amount`` means no amount. Rows shaped the way
    csv.DictReader reports a wrong field count (a ``None`` key or value) are
    rejected like any other malformed row.

    Raises:
        InvalidRecordError: the row does not describe a valid operation
    """
    if None in row:
        raise InvalidRecordError("too many fields")
    for name in FIELDS:
        if row.get(name) is None:
            raise InvalidRecordError(f"missing field {name!r}")

    transaction_type = _parse_type(row["type"])
    client_id = _parse_id(row["client"], MAX_CLIENT_ID, "client")
    transaction_id = _parse_id(row["tx"], MAX_TRANSACTION_ID, "tx")
    amount_str = row["amount"]

    match transaction_type:
        case TransactionType.DEPOSIT | TransactionType.WITHDRAWAL:
            amount = _parse_amount(amount_str)
            if transaction_type is TransactionType.WITHDRAWAL:
                amount = amount.copy_negate()
            return Transaction(transaction_id=transaction_id, client_id=client_id, amount=amount)
        case _:
            if amount_str:
                raise InvalidRecordError(f"amount not allowed for {transaction_type.value}")
            return TransactionMod(
                transaction_id=transaction_id,
                client_id=client_id,
                state=_MOD_TARGETS[transaction_type],
            )


def normalize(row: Mapping[str, Optional[str]]) -> Optional[Operation]:
    """Same as parse_operation, but returns None for rejected rows."""
    try:
        return parse_operation(row)
    except InvalidRecordError as e:
        logger.warning(f"Skipping row {dict(row)}: {e}")
        return None


def _parse_type(value: str) -> TransactionType:
    try:
        return TransactionType(value.strip().lower())
    except ValueError:
        raise InvalidRecordError(f"unknown transaction type {value!r}") from None


def _parse_id(value: str, maximum: int, name: str) -> int:
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        raise InvalidRecordError(f"{name} must be an unsigned integer, got {value!r}")
    parsed = int(value)
    if parsed > maximum:
        raise InvalidRecordError(f"{name} {parsed} exceeds {maximum}")
    return parsed


def _parse_amount(value: str) -> Decimal:
    """Parse a strictly positive amount with at most DECIMAL_PLACES fractional digits."""
    if not value:
        raise InvalidRecordError("amount is required")
    if not _AMOUNT_PATTERN.fullmatch(value.strip()):
        raise InvalidRecordError(f"amount {value!r} must be a plain positive decimal")

    amount = Decimal(value.strip())
    # zero shares the invalid-amount rejection
    if amount.is_zero():
        raise InvalidRecordError(f"amount {value!r} must be positive")
    if fractional_digits(amount) > DECIMAL_PLACES:
        raise InvalidRecordError(f"amount {value!r} has more than {DECIMAL_PLACES} decimal places")

    try:
        return rescale(amount)
    except (AmountOverflowError, Inexact, InvalidOperation):
        raise InvalidRecordError(f"amount {value!r} out of range") from None
