import csv
import logging
import os
import sys
from typing import List, Optional, TextIO

from csv_io import parse_row, read_rows, write_accounts
from errors import ExchangeError
from exchange import Exchange
from models import ProcessingStats

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NO_FILE = 1
EXIT_INVALID = 2

DEFAULT_LOG_LEVEL = "WARNING"


def configure_logging() -> None:
    """Log to stderr at the level named by LOG_LEVEL."""
    level = logging.getLevelName(os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def run(filepath: str, output: TextIO) -> ProcessingStats:
    """Process a CSV file of transactions and write the final balances to output."""
    exchange = Exchange()
    stats = ProcessingStats()

    with open(filepath, "r", newline="") as f:
        for row in read_rows(f):
            transaction = None if row is None else parse_row(row)
            if transaction is None:
                stats.record_skipped()
                continue

            try:
                exchange.handle(transaction)
            except ExchangeError as e:
                logger.warning(f"Transaction failed: {e}")
                stats.record_failure(e.kind)
            else:
                stats.record_success()

    write_accounts(exchange.clients(), output)
    for kind, count in sorted(stats.failures_by_kind.items()):
        logger.info(f"Rejected {count} transaction(s): {kind}")
    return stats


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    args = sys.argv[1:] if argv is None else argv

    if len(args) != 1:
        print("Usage: python main.py <transactions.csv> > accounts.csv", file=sys.stderr)
        return EXIT_NO_FILE

    try:
        stats = run(args[0], sys.stdout)
    except (OSError, ValueError, csv.Error) as e:
        logger.error(f"Cannot handle input file {args[0]}: {e}")
        return EXIT_INVALID

    print(stats.summary(), file=sys.stderr)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
