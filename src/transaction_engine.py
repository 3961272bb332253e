import dataclasses
import logging
from typing import Iterator, Optional

from amounts import AmountOverflowError, ZERO, checked_add, checked_sub
from ledger_store import LedgerStore, InMemoryLedgerStore
from models import (
    ApplyResult,
    ClientAccount,
    Operation,
    Transaction,
    TransactionMod,
    TransactionState,
)

logger = logging.getLogger(__name__)


class TransactionEngine:
    """
    Applies operations to the ledger one at a time, in stream order.
    Every check runs before the first store write, so a rejected operation
    leaves both transactions and clients untouched.
    """

    def __init__(self, store: Optional[LedgerStore] = None):
        self._store = store if store is not None else InMemoryLedgerStore()

    def apply(self, operation: Operation) -> bool:
        """Return True if the operation was applied, False if it was rejected."""
        return self.apply_operation(operation) is ApplyResult.APPLIED

    def apply_operation(self, operation: Operation) -> ApplyResult:
        match operation:
            case Transaction():
                result = self._apply_transaction(operation)
            case TransactionMod():
                result = self._apply_mod(operation)
            case _:
                raise TypeError(f"not an operation: {operation!r}")

        if result is not ApplyResult.APPLIED:
            logger.info(f"Rejected {operation}: {result.value}")
        return result

    def get_client(self, client_id: int) -> Optional[ClientAccount]:
        return self._store.get_client(client_id)

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        return self._store.get_transaction(transaction_id)

    def clients(self) -> Iterator[ClientAccount]:
        return self._store.iter_clients()

    def _apply_transaction(self, transaction: Transaction) -> ApplyResult:
        if self._store.get_transaction(transaction.transaction_id) is not None:
            return ApplyResult.DUPLICATE_TRANSACTION

        account = self._store.get_client(transaction.client_id)
        is_withdrawal = transaction.amount.is_signed()

        if account is None:
            # a client's first activity cannot be a withdrawal
            if is_withdrawal:
                return ApplyResult.UNKNOWN_CLIENT
            self._store.insert_client(ClientAccount(client_id=transaction.client_id, total=transaction.amount, held=ZERO))
        else:
            if account.locked and is_withdrawal:
                return ApplyResult.ACCOUNT_LOCKED
            try:
                new_available = checked_add(account.available, transaction.amount)
                new_total = checked_add(account.total, transaction.amount)
            except AmountOverflowError:
                return ApplyResult.AMOUNT_OVERFLOW
            # total can go negative on its own when a withdrawal is disputed
            if new_available.is_signed() or new_total.is_signed():
                return ApplyResult.INSUFFICIENT_FUNDS
            self._store.update_client(dataclasses.replace(account, total=new_total))

        self._store.insert_transaction(dataclasses.replace(transaction, state=TransactionState.RESOLVED))
        return ApplyResult.APPLIED

    def _apply_mod(self, mod: TransactionMod) -> ApplyResult:
        original = self._store.get_transaction(mod.transaction_id)
        if original is None:
            return ApplyResult.UNKNOWN_TRANSACTION

        if original.client_id != mod.client_id:
            logger.warning(f"{mod.state.value} for tx {mod.transaction_id}: client mismatch (owner {original.client_id}, got {mod.client_id})")
            return ApplyResult.CLIENT_MISMATCH

        # every stored transaction was inserted together with its client
        account = self._store.get_client(original.client_id)

        if not original.state.can_transition_to(mod.state):
            return ApplyResult.INVALID_TRANSITION

        try:
            match mod.state:
                case TransactionState.DISPUTED:
                    updated = dataclasses.replace(account, held=checked_add(account.held, original.amount))
                case TransactionState.RESOLVED:
                    updated = dataclasses.replace(account, held=checked_sub(account.held, original.amount))
                case TransactionState.CHARGEBACK:
                    updated = dataclasses.replace(
                        account,
                        held=checked_sub(account.held, original.amount),
                        total=checked_sub(account.total, original.amount),
                        locked=True,
                    )
        except AmountOverflowError:
            return ApplyResult.AMOUNT_OVERFLOW

        self._store.update_client(updated)
        self._store.update_transaction(dataclasses.replace(original, state=mod.state))
        return ApplyResult.APPLIED
