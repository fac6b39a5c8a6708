import csv
import logging
import re
from decimal import Decimal, InvalidOperation, localcontext
from typing import Dict, Iterable, Iterator, Optional, TextIO

from models import MONEY_CONTEXT, MONEY_PRECISION, AccountStatus, Transaction, TransactionType

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

# ASCII only: int() and Decimal() would also take "1_0" and non-ASCII digits.
ID_PATTERN = re.compile(r"\+?[0-9]+")
AMOUNT_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")

OUTPUT_HEADER = ["client", "available", "held", "total", "locked"]


class InputSourceError(Exception):
    """The input as a whole could not be read. Fatal for the run."""


def read_transactions(filepath: str) -> Iterator[Transaction]:
    """
    Yield transactions from a CSV file in file order.

    Malformed rows are logged and skipped. Failures of the file itself
    raise InputSourceError, possibly after some rows were already yielded.
    """
    try:
        with open(filepath, "r", newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for row in reader:
                transaction = parse_csv_row(row)
                if transaction:
                    yield transaction
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise InputSourceError(f"Cannot read transactions from {filepath}: {e}") from e


def parse_csv_row(row: Dict[Optional[str], Optional[str]]) -> Optional[Transaction]:
    """Parse CSV row into Transaction. Returns None for malformed rows."""
    try:
        # Short rows carry None values, long rows an extra None key.
        normalized = {k.strip(): (v or "").strip() for k, v in row.items() if isinstance(k, str)}

        transaction_type = TransactionType(normalized["type"])
        client_id = _parse_id(normalized["client"], MAX_CLIENT_ID)
        transaction_id = _parse_id(normalized["tx"], MAX_TRANSACTION_ID)

        amount = None
        amount_str = normalized.get("amount", "")
        if amount_str:
            amount = _parse_amount(amount_str)

        return Transaction(
            transaction_type=transaction_type,
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
        )
    except (KeyError, ValueError, InvalidOperation) as e:
        logger.warning(f"Failed to parse row {row}: {e!r}")
        return None


def _parse_id(value: str, maximum: int) -> int:
    if not ID_PATTERN.fullmatch(value):
        raise ValueError(f"id must be an unsigned integer, got {value!r}")
    parsed = int(value)
    if parsed > maximum:
        raise ValueError(f"id {parsed} out of range 0..{maximum}")
    return parsed


def _parse_amount(value: str) -> Decimal:
    if not AMOUNT_PATTERN.fullmatch(value):
        raise ValueError(f"amount must be a plain decimal number, got {value!r}")
    amount = Decimal(value)
    if amount < 0:
        raise ValueError(f"amount must not be negative, got {value}")
    if len(amount.as_tuple().digits) > MONEY_PRECISION:
        raise ValueError(f"amount {value} has more than {MONEY_PRECISION} significant digits")
    return amount


def format_decimal(value: Decimal) -> str:
    """Render a decimal exactly, without trailing zeros or exponent notation."""
    with localcontext(MONEY_CONTEXT):
        normalized = value.normalize()
    if normalized.is_zero():
        return "0"
    return f"{normalized:f}"


def write_statuses(statuses: Iterable[AccountStatus], stream: TextIO) -> None:
    """Write one CSV row per account, ordered by client id."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)
    for status in sorted(statuses, key=lambda s: s.client_id):
        writer.writerow([
            status.client_id,
            format_decimal(status.available),
            format_decimal(status.held),
            format_decimal(status.total),
            str(status.locked).lower(),
        ])
