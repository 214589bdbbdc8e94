from collections import Counter
from dataclasses import dataclass, field
from decimal import Context, Decimal, ROUND_HALF_EVEN
from enum import Enum
from typing import Dict, Optional

# Amounts are kept as exact decimals; rounding only happens in format_amount.
Amount = Decimal
ClientID = int
TransactionID = int

PRECISION = 4
MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

# Input amounts are bounded so that sums over a whole run fit LEDGER_CONTEXT exactly.
MAX_AMOUNT = Decimal(10) ** 28
MAX_AMOUNT_SCALE = 28
LEDGER_CONTEXT = Context(prec=80)

_QUANTUM = Decimal(1).scaleb(-PRECISION)


def format_amount(amount: Amount) -> str:
    """Render an amount with exactly PRECISION fractional digits."""
    return f"{amount.quantize(_QUANTUM, rounding=ROUND_HALF_EVEN, context=LEDGER_CONTEXT):f}"


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def has_amount(self) -> bool:
        match self:
            case TransactionType.DEPOSIT | TransactionType.WITHDRAWAL:
                return True
            case TransactionType.DISPUTE | TransactionType.RESOLVE | TransactionType.CHARGEBACK:
                return False


@dataclass(frozen=True)
class Transaction:
    """
    A single ledger event.
    Deposits and withdrawals carry an amount; disputes, resolves and
    chargebacks reference an earlier transaction by id and carry none.
    """

    transaction_type: TransactionType
    client_id: ClientID
    transaction_id: TransactionID
    amount: Optional[Amount] = None

    def __post_init__(self):
        if self.transaction_type.has_amount and self.amount is None:
            raise ValueError(f"{self.transaction_type.value} requires an amount")
        if not self.transaction_type.has_amount and self.amount is not None:
            raise ValueError(f"{self.transaction_type.value} must not carry an amount")

    @property
    def has_amount(self) -> bool:
        return self.transaction_type.has_amount

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass(frozen=True)
class ClientSnapshot:
    """Read-only copy of a client's balances."""

    client_id: ClientID
    available: Amount
    held: Amount
    total: Amount
    locked: bool

    def to_record(self) -> Dict[str, str]:
        return {
            "client": str(self.client_id),
            "available": format_amount(self.available),
            "held": format_amount(self.held),
            "total": format_amount(self.total),
            "locked": str(self.locked).lower(),
        }


@dataclass
class ClientAccount:
    client_id: ClientID
    available: Amount = Decimal("0")
    held: Amount = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Amount:
        return LEDGER_CONTEXT.add(self.available, self.held)

    def credit(self, amount: Amount) -> None:
        self.available = LEDGER_CONTEXT.add(self.available, amount)

    def debit(self, amount: Amount) -> None:
        self.available = LEDGER_CONTEXT.subtract(self.available, amount)

    def hold(self, amount: Amount) -> None:
        self.debit(amount)
        self.held = LEDGER_CONTEXT.add(self.held, amount)

    def release_hold(self, amount: Amount) -> None:
        self.held = LEDGER_CONTEXT.subtract(self.held, amount)
        self.credit(amount)

    def remove_held(self, amount: Amount) -> None:
        self.held = LEDGER_CONTEXT.subtract(self.held, amount)

    def lock(self) -> None:
        self.locked = True

    def snapshot(self) -> ClientSnapshot:
        return ClientSnapshot(
            client_id=self.client_id,
            available=self.available,
            held=self.held,
            total=self.total,
            locked=self.locked,
        )


@dataclass
class ProcessingStats:
    """Counters for a single batch run."""

    processed: int = 0
    failed: int = 0
    skipped: int = 0
    failures_by_kind: Counter = field(default_factory=Counter)

    def record_success(self) -> None:
        self.processed += 1

    def record_failure(self, kind: str) -> None:
        self.failed += 1
        self.failures_by_kind[kind] += 1

    def record_skipped(self) -> None:
        self.skipped += 1

    def summary(self) -> str:
        return f"Processed: {self.processed}, Failed: {self.failed}, Skipped: {self.skipped}"
