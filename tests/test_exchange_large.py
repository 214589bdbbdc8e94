import io
import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from csv_io import read_transactions
from errors import ExchangeError
from exchange import Exchange


def apply_all(rows):
    exchange = Exchange()
    for transaction in read_transactions(io.StringIO('\n'.join(rows))):
        try:
            exchange.handle(transaction)
        except ExchangeError:
            pass
    return exchange


class TestExchangeLargeScale:
    def test_1000_accounts_6000_transactions(self):
        """Test with 1000 accounts and 6000 transactions."""
        num_clients = 1000
        rows = ["type, client, tx, amount"]
        tx_id = 1

        # Each client gets: 3 deposits (100, 200, 300) and 2 withdrawals (50, 100)
        for client_id in range(1, num_clients + 1):
            for kind, amount in (("deposit", 100), ("deposit", 200), ("deposit", 300), ("withdrawal", 50), ("withdrawal", 100)):
                rows.append(f"{kind}, {client_id}, {tx_id}, {amount}")
                tx_id += 1

        # Extra deposit for each client
        for client_id in range(1, num_clients + 1):
            rows.append(f"deposit, {client_id}, {tx_id}, 50")
            tx_id += 1

        exchange = apply_all(rows)
        clients = {c.client_id: c for c in exchange.clients()}

        assert len(clients) == num_clients
        assert exchange.transaction_count == 6000

        for client_id in range(1, num_clients + 1):
            assert clients[client_id].available == Decimal("500"), f"Client {client_id}"
            assert clients[client_id].held == Decimal("0")
            assert clients[client_id].locked is False

    def test_with_disputes_resolves_chargebacks(self):
        """Disputes, resolves and chargebacks across 50 accounts."""
        rows = ["type, client, tx, amount"]

        # Client 1-10: Normal deposits only
        # Client 11-20: Deposit -> Dispute -> Resolve
        # Client 21-30: Deposit -> Dispute -> Chargeback
        for client_id in range(1, 31):
            rows.append(f"deposit, {client_id}, {client_id * 100 + 1}, 100")
            rows.append(f"deposit, {client_id}, {client_id * 100 + 2}, 150")
            rows.append(f"deposit, {client_id}, {client_id * 100 + 3}, 250")
        for client_id in range(11, 31):
            rows.append(f"dispute, {client_id}, {client_id * 100 + 1},")
        for client_id in range(11, 21):
            rows.append(f"resolve, {client_id}, {client_id * 100 + 1},")
        for client_id in range(21, 31):
            rows.append(f"chargeback, {client_id}, {client_id * 100 + 1},")

        # Client 31-40: Deposit -> Withdrawal -> Dispute (on deposit)
        for client_id in range(31, 41):
            rows.append(f"deposit, {client_id}, {client_id * 100 + 1}, 150")
            rows.append(f"deposit, {client_id}, {client_id * 100 + 2}, 250")
            rows.append(f"withdrawal, {client_id}, {client_id * 100 + 3}, 100")
        for client_id in range(31, 41):
            rows.append(f"dispute, {client_id}, {client_id * 100 + 1},")

        # Client 21-30: Every follow-up is refused once locked
        for client_id in range(21, 31):
            rows.append(f"deposit, {client_id}, {client_id * 100 + 50}, 1000")

        exchange = apply_all(rows)

        for client_id in range(1, 21):
            client = exchange.get_client(client_id)
            assert client.available == Decimal("500"), f"Client {client_id}"
            assert client.held == Decimal("0")
            assert client.locked is False

        for client_id in range(21, 31):
            client = exchange.get_client(client_id)
            assert client.available == Decimal("400"), f"Client {client_id}"
            assert client.held == Decimal("0")
            assert client.total == Decimal("400")
            assert client.locked is True

        for client_id in range(31, 41):
            client = exchange.get_client(client_id)
            assert client.available == Decimal("150"), f"Client {client_id}"
            assert client.held == Decimal("150")
            assert client.total == Decimal("300")
            assert client.locked is False

        for client in exchange.clients():
            assert client.total == client.available + client.held
