import sys
import logging
from decimal import DecimalException
from typing import TextIO

from config import Settings
from csv_io import InputSourceError, read_transactions, write_statuses
from ledger import Ledger
from sharded_ledger import ShardedLedger

logger = logging.getLogger(__name__)


def run(filepath: str, output: TextIO, num_workers: int = 1) -> None:
    """Replay the whole file, then write the final account table."""
    ledger = Ledger() if num_workers == 1 else ShardedLedger(num_workers)
    stats = ledger.process_all(read_transactions(filepath))
    logger.info(f"Processed {stats.total} transactions: {stats}")
    write_statuses(ledger.snapshot(), output)


def main():
    if len(sys.argv) != 2:
        print("Usage: ledger-replay <input.csv>", file=sys.stderr)
        sys.exit(1)

    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        run(sys.argv[1], sys.stdout, num_workers=settings.NUM_WORKERS)
    except DecimalException as e:
        logger.error(f"Balance cannot be represented exactly: {e!r}")
        sys.exit(1)
    except InputSourceError as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
