from typing import Dict, Iterator, Optional

from errors import AccountLocked
from models import ClientAccount, ClientID


class ClientRegistry:
    """
    Owns every client account, keyed by client id.
    Accounts are created lazily on first reference and never removed.
    """

    def __init__(self):
        self._accounts: Dict[ClientID, ClientAccount] = {}

    def get_or_create_account(self, client_id: ClientID) -> ClientAccount:
        """
        Get an account for mutation, creating a zero-balance one if absent.

        Raises:
            AccountLocked: the account is frozen and must not be modified.
        """
        account = self._accounts.get(client_id)
        if account is None:
            account = ClientAccount(client_id=client_id)
            self._accounts[client_id] = account
        if account.locked:
            raise AccountLocked(account.snapshot())
        return account

    def get_account(self, client_id: ClientID) -> Optional[ClientAccount]:
        """Look up an account without creating it."""
        return self._accounts.get(client_id)

    def iter_accounts(self) -> Iterator[ClientAccount]:
        return iter(self._accounts.values())

    def __contains__(self, client_id: ClientID) -> bool:
        return client_id in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)
