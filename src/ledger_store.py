from abc import ABC, abstractmethod
from typing import Dict, Iterator, Optional

from models import Transaction, ClientAccount


class LedgerStore(ABC):
    """
    Key-value storage for transactions and client accounts.
    The engine only ever reads, inserts, or overwrites whole entities, so a
    durable backend can replace the in-memory one without touching engine logic.
    """

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        ...

    @abstractmethod
    def insert_transaction(self, transaction: Transaction) -> None:
        ...

    @abstractmethod
    def update_transaction(self, transaction: Transaction) -> None:
        ...

    @abstractmethod
    def get_client(self, client_id: int) -> Optional[ClientAccount]:
        ...

    @abstractmethod
    def insert_client(self, account: ClientAccount) -> None:
        ...

    @abstractmethod
    def update_client(self, account: ClientAccount) -> None:
        ...

    @abstractmethod
    def iter_clients(self) -> Iterator[ClientAccount]:
        ...


class InMemoryLedgerStore(LedgerStore):
    """
    Two dicts standing in for a real database.
    Not thread-safe; a single engine owns it for the whole run.
    """

    def __init__(self):
        self._transactions: Dict[int, Transaction] = {}
        self._accounts: Dict[int, ClientAccount] = {}

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        return self._transactions.get(transaction_id)

    def insert_transaction(self, transaction: Transaction) -> None:
        """Store a new transaction. Ids are never reused."""
        if transaction.transaction_id in self._transactions:
            raise KeyError(f"transaction {transaction.transaction_id} already exists")
        self._transactions[transaction.transaction_id] = transaction

    def update_transaction(self, transaction: Transaction) -> None:
        if transaction.transaction_id not in self._transactions:
            raise KeyError(f"transaction {transaction.transaction_id} does not exist")
        self._transactions[transaction.transaction_id] = transaction

    def get_client(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def insert_client(self, account: ClientAccount) -> None:
        if account.client_id in self._accounts:
            raise KeyError(f"client {account.client_id} already exists")
        self._accounts[account.client_id] = account

    def update_client(self, account: ClientAccount) -> None:
        if account.client_id not in self._accounts:
            raise KeyError(f"client {account.client_id} does not exist")
        self._accounts[account.client_id] = account

    def iter_clients(self) -> Iterator[ClientAccount]:
        return iter(list(self._accounts.values()))
