from typing import Dict, Optional

from errors import DuplicateTransactionId, InvalidTransaction
from models import Transaction, TransactionID


class TransactionLog:
    """
    Accepted deposits and withdrawals, kept for later dispute lookups.
    Entries are immutable once stored and live for the whole run.
    """

    def __init__(self):
        self._transactions: Dict[TransactionID, Transaction] = {}

    def contains(self, transaction_id: TransactionID) -> bool:
        return transaction_id in self._transactions

    def get_transaction(self, transaction_id: TransactionID) -> Optional[Transaction]:
        return self._transactions.get(transaction_id)

    def store_transaction(self, transaction: Transaction) -> None:
        """Store an amount-bearing transaction under its id."""
        if not transaction.has_amount:
            raise InvalidTransaction(
                f"Only deposits and withdrawals can be stored, got {transaction.transaction_type.value}",
                transaction,
            )
        if transaction.transaction_id in self._transactions:
            raise DuplicateTransactionId(transaction)
        self._transactions[transaction.transaction_id] = transaction

    def __contains__(self, transaction_id: TransactionID) -> bool:
        return self.contains(transaction_id)

    def __len__(self) -> int:
        return len(self._transactions)
