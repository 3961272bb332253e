from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Union

from amounts import ZERO, difference


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class TransactionState(Enum):
    """
    Lifecycle of a stored transaction.
    RESOLVED and DISPUTED may alternate any number of times; CHARGEBACK is final.
    """

    RESOLVED = "resolved"
    DISPUTED = "disputed"
    CHARGEBACK = "chargeback"

    @property
    def required_source(self) -> "TransactionState":
        """State a transaction must be in to move into this one."""
        return _REQUIRED_SOURCE[self]

    def can_transition_to(self, target: "TransactionState") -> bool:
        return target.required_source is self


_REQUIRED_SOURCE = {
    TransactionState.DISPUTED: TransactionState.RESOLVED,
    TransactionState.RESOLVED: TransactionState.DISPUTED,
    TransactionState.CHARGEBACK: TransactionState.DISPUTED,
}


class ApplyResult(Enum):
    APPLIED = "applied"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    UNKNOWN_CLIENT = "unknown_client"
    ACCOUNT_LOCKED = "account_locked"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    AMOUNT_OVERFLOW = "amount_overflow"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    CLIENT_MISMATCH = "client_mismatch"
    INVALID_TRANSITION = "invalid_transition"


@dataclass(frozen=True)
class Transaction:
    """A ledger entry. Deposits carry a positive amount, withdrawals a negative one."""

    transaction_id: int
    client_id: int
    amount: Decimal
    state: TransactionState = TransactionState.RESOLVED

    def __repr__(self) -> str:
        return f"Transaction(tx={self.transaction_id}, client={self.client_id}, amount={self.amount}, state={self.state.value})"


@dataclass(frozen=True)
class TransactionMod:
    """Request to move an existing transaction into ``state``."""

    transaction_id: int
    client_id: int
    state: TransactionState

    def __repr__(self) -> str:
        return f"TransactionMod(tx={self.transaction_id}, client={self.client_id}, state={self.state.value})"


Operation = Union[Transaction, TransactionMod]


@dataclass(frozen=True)
class ClientAccount:
    client_id: int
    total: Decimal = ZERO
    held: Decimal = ZERO
    locked: bool = False

    @property
    def available(self) -> Decimal:
        return difference(self.total, self.held)


class ProcessingStats:
    """Counters for a single processing run."""

    def __init__(self):
        self.applied = 0
        self.rejected = 0
        self.malformed = 0

    def record_applied(self):
        self.applied += 1

    def record_rejected(self):
        self.rejected += 1

    def record_malformed(self):
        self.malformed += 1

    def __repr__(self) -> str:
        return f"Processed: {self.applied}, Rejected: {self.rejected}, Malformed: {self.malformed}"
