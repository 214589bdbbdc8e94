import logging
from typing import Iterator, Optional

from errors import AccountLocked, DuplicateTransactionId, InsufficientFunds, InvalidTransaction, UnknownTransaction
from models import Amount, ClientAccount, ClientID, ClientSnapshot, Transaction, TransactionType
from registry import ClientRegistry
from transaction_log import TransactionLog

logger = logging.getLogger(__name__)


class Exchange:
    """
    Applies transactions to client balances, one at a time.

    Every call to handle() is all-or-nothing: a rejected transaction raises an
    ExchangeError and leaves the registry and the log as they were. The one
    exception is a withdrawal from an unknown client, which still registers
    that client with zero balances.

    Disputes are not tracked per transaction. Resolves and chargebacks assume
    a matching dispute was accepted earlier, and the client named on a
    dispute-side transaction is the one whose balances move.
    """

    def __init__(self):
        self._registry = ClientRegistry()
        self._log = TransactionLog()

    def clients(self) -> Iterator[ClientSnapshot]:
        """Snapshots of every registered client."""
        for account in self._registry.iter_accounts():
            yield account.snapshot()

    def get_client(self, client_id: ClientID) -> Optional[ClientSnapshot]:
        account = self._registry.get_account(client_id)
        if account is None:
            return None
        return account.snapshot()

    @property
    def transaction_count(self) -> int:
        return len(self._log)

    def handle(self, transaction: Transaction) -> None:
        """
        Apply a single transaction.

        Raises:
            DuplicateTransactionId: deposit/withdrawal id already accepted
            UnknownTransaction: dispute/resolve/chargeback references an id not in the log
            InsufficientFunds: withdrawal exceeds available funds
            InvalidTransaction: referenced transaction carries no amount
            AccountLocked: client was frozen by an earlier chargeback
        """
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                self._handle_chargeback(transaction)
        logger.debug(f"Applied {transaction!r}")

    def _get_account(self, transaction: Transaction) -> ClientAccount:
        try:
            return self._registry.get_or_create_account(transaction.client_id)
        except AccountLocked as e:
            e.transaction = transaction
            raise

    def _assert_id_available(self, transaction: Transaction) -> None:
        if transaction.transaction_id in self._log:
            raise DuplicateTransactionId(transaction)

    def _referenced_amount(self, transaction: Transaction) -> Amount:
        original = self._log.get_transaction(transaction.transaction_id)
        if original is None:
            raise UnknownTransaction(transaction)
        if original.amount is None:
            raise InvalidTransaction("No amount associated with referenced transaction", transaction)
        return original.amount

    def _handle_deposit(self, transaction: Transaction) -> None:
        self._assert_id_available(transaction)
        account = self._get_account(transaction)
        account.credit(transaction.amount)
        self._log.store_transaction(transaction)

    def _handle_withdrawal(self, transaction: Transaction) -> None:
        self._assert_id_available(transaction)
        # Lookup may register a new client even if the withdrawal is refused.
        account = self._get_account(transaction)
        if account.available < transaction.amount:
            raise InsufficientFunds(transaction, account.available, transaction.amount)
        account.debit(transaction.amount)
        self._log.store_transaction(transaction)

    def _handle_dispute(self, transaction: Transaction) -> None:
        amount = self._referenced_amount(transaction)
        account = self._get_account(transaction)
        account.hold(amount)

    def _handle_resolve(self, transaction: Transaction) -> None:
        amount = self._referenced_amount(transaction)
        account = self._get_account(transaction)
        account.release_hold(amount)

    def _handle_chargeback(self, transaction: Transaction) -> None:
        amount = self._referenced_amount(transaction)
        account = self._get_account(transaction)
        account.remove_held(amount)
        account.lock()
