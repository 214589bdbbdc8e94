from typing import Optional

from models import Amount, ClientSnapshot, Transaction


class ExchangeError(Exception):
    """
    Base class for rejected transactions.
    A rejection is final for that transaction; the caller decides whether to
    log it and carry on with the next one.
    """

    kind = "exchange_error"

    def __init__(self, message: str, transaction: Optional[Transaction] = None):
        super().__init__(message)
        self.message = message
        self.transaction = transaction

    def __str__(self) -> str:
        if self.transaction is None:
            return self.message
        return f"{self.message}: {self.transaction!r}"


class DuplicateTransactionId(ExchangeError):
    kind = "duplicate_transaction_id"

    def __init__(self, transaction: Transaction):
        super().__init__(f"Transaction id {transaction.transaction_id} already exists", transaction)


class UnknownTransaction(ExchangeError):
    kind = "unknown_transaction"

    def __init__(self, transaction: Transaction):
        super().__init__(f"Transaction id {transaction.transaction_id} does not exist", transaction)


class InsufficientFunds(ExchangeError):
    kind = "insufficient_funds"

    def __init__(self, transaction: Transaction, available: Amount, required: Amount):
        super().__init__(
            f"Insufficient funds available. Available: {available}, required: {required}",
            transaction,
        )
        self.available = available
        self.required = required


class InvalidTransaction(ExchangeError):
    kind = "invalid_transaction"


class AccountLocked(ExchangeError):
    """Raised for any mutation of a client whose account is frozen."""

    kind = "account_locked"

    def __init__(self, snapshot: ClientSnapshot, transaction: Optional[Transaction] = None):
        super().__init__(f"Client {snapshot.client_id} is locked", transaction)
        self.snapshot = snapshot
