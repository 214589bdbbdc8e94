import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional, TextIO

from models import (
    Amount,
    ClientSnapshot,
    MAX_AMOUNT,
    MAX_AMOUNT_SCALE,
    MAX_CLIENT_ID,
    MAX_TRANSACTION_ID,
    Transaction,
    TransactionType,
)

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "#"
OUTPUT_FIELDS = ["client", "available", "held", "total", "locked"]

# Labels are matched case-sensitively.
TRANSACTION_LABELS: Dict[str, TransactionType] = {
    "deposit": TransactionType.DEPOSIT,
    "withdraw": TransactionType.WITHDRAWAL,
    "withdrawal": TransactionType.WITHDRAWAL,
    "dispute": TransactionType.DISPUTE,
    "resolve": TransactionType.RESOLVE,
    "chargeback": TransactionType.CHARGEBACK,
}


def read_rows(stream: TextIO) -> Iterator[Optional[Dict[str, str]]]:
    """
    Yield trimmed CSV rows keyed by trimmed header names.
    Comment lines are dropped and short rows are padded with empty strings.
    A row the csv module cannot read is yielded as None.

    Raises:
        ValueError: the input has no header row
    """
    lines = (line for line in stream if not line.lstrip().startswith(COMMENT_PREFIX))
    reader = csv.DictReader(lines, restval="")
    if reader.fieldnames is None:
        raise ValueError("Input has no header row")
    reader.fieldnames = [name.strip() for name in reader.fieldnames]

    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            logger.debug(f"Skipping unreadable row at line {reader.line_num}: {e}")
            yield None
            continue
        yield {k: v.strip() for k, v in row.items() if k is not None}


def _parse_id(value: str, maximum: int) -> int:
    if not value.isdigit():
        raise ValueError(f"expected an unsigned integer, got {value!r}")
    parsed = int(value)
    if parsed > maximum:
        raise ValueError(f"{parsed} is out of range (max {maximum})")
    return parsed


def _parse_amount(value: str) -> Optional[Amount]:
    if not value:
        return None
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"invalid amount {value!r}") from None
    # Non-positive amounts are dropped here; the engine itself accepts any amount.
    if not amount.is_finite() or amount <= 0:
        raise ValueError(f"amount must be a positive number, got {value!r}")
    if amount >= MAX_AMOUNT or amount.as_tuple().exponent < -MAX_AMOUNT_SCALE:
        raise ValueError(f"amount {value!r} is out of range")
    return amount


def parse_row(row: Dict[str, str]) -> Optional[Transaction]:
    """Convert a CSV row into a Transaction, or None if the row is malformed."""
    try:
        label = row["type"]
        if label not in TRANSACTION_LABELS:
            raise ValueError(f"unsupported transaction type {label!r}")

        return Transaction(
            transaction_type=TRANSACTION_LABELS[label],
            client_id=_parse_id(row["client"], MAX_CLIENT_ID),
            transaction_id=_parse_id(row["tx"], MAX_TRANSACTION_ID),
            amount=_parse_amount(row.get("amount", "")),
        )
    except (KeyError, ValueError) as e:
        logger.debug(f"Skipping row {row}: {e}")
        return None


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """Yield every well-formed transaction in the stream, skipping the rest."""
    for row in read_rows(stream):
        transaction = None if row is None else parse_row(row)
        if transaction is not None:
            yield transaction


def write_accounts(snapshots: Iterable[ClientSnapshot], stream: TextIO) -> None:
    """Write client balances as CSV, ordered by client id."""
    writer = csv.DictWriter(stream, fieldnames=OUTPUT_FIELDS, lineterminator="\n")
    writer.writeheader()
    for snapshot in sorted(snapshots, key=lambda s: s.client_id):
        writer.writerow(snapshot.to_record())
