"""
CSV collaborators around the ledger engine.

Input rows look like ``type, client, tx, amount``; the amount column is left
empty for disputes, resolves and chargebacks. Output is one row per client:
``client,available,held,total,locked`` with amounts at 4 fractional digits.
"""
import csv
import logging
import re
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, TextIO, Union

from amount import Amount
from errors import InvalidAmount, InvalidEvent
from models import ClientAccount, Transaction, TransactionType

logger = logging.getLogger(__name__)

INPUT_FIELDS = ("type", "client", "tx", "amount")
OUTPUT_FIELDS = ("client", "available", "held", "total", "locked")

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

# ASCII digits only; int() alone also takes signs, underscores and other scripts' digits
_ID_PATTERN = re.compile(r"[0-9]+")


@contextmanager
def _open_source(source: Union[str, TextIO]) -> Iterator[TextIO]:
    if isinstance(source, str):
        with open(source, "r", encoding="utf-8", newline="") as f:
            yield f
    else:
        yield source


def read_transactions(source: Union[str, TextIO]) -> Iterator[Transaction]:
    """
    Lazily yield transactions from a CSV path or open text stream.
    Raises InvalidEvent on the first malformed row; rows before it have already been yielded.
    """
    with _open_source(source) as f:
        reader = csv.DictReader(f, skipinitialspace=True)
        try:
            if reader.fieldnames is None:
                return

            header = [name.strip().lower() for name in reader.fieldnames]
            missing = [name for name in INPUT_FIELDS[:3] if name not in header]
            if missing:
                raise InvalidEvent(f"Missing column(s) {', '.join(missing)} in header {reader.fieldnames}", line_number=1)
            reader.fieldnames = header

            for row in reader:
                yield parse_csv_row(row, reader.line_num)
        except UnicodeDecodeError as e:
            # decoding runs ahead of the csv reader, so only a lower bound on the line is known
            raise InvalidEvent(f"Input is not valid UTF-8 after line {reader.line_num}: {e.reason}") from e


def parse_csv_row(row: Dict[str, Optional[str]], line_number: Optional[int] = None) -> Transaction:
    """Parse one CSV row (already keyed by normalized header names) into a Transaction."""
    normalized = {k: (v or "").strip() for k, v in row.items() if k is not None}

    type_str = normalized.get("type", "").lower()
    try:
        transaction_type = TransactionType(type_str)
    except ValueError:
        raise InvalidEvent(f"Unknown transaction type {type_str!r}", line_number) from None

    client_id = _parse_id(normalized, "client", MAX_CLIENT_ID, line_number)
    transaction_id = _parse_id(normalized, "tx", MAX_TRANSACTION_ID, line_number)

    amount = None
    amount_str = normalized.get("amount", "")
    if transaction_type.carries_amount:
        if not amount_str:
            raise InvalidEvent(f"{transaction_type.value} tx {transaction_id} is missing an amount", line_number)
        try:
            amount = Amount.from_decimal_string(amount_str)
        except InvalidAmount as e:
            raise InvalidEvent(str(e), line_number) from e
    elif amount_str:
        logger.debug(f"Ignoring amount {amount_str!r} on {transaction_type.value} tx {transaction_id}")

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_id(normalized: Dict[str, str], name: str, maximum: int, line_number: Optional[int]) -> int:
    value = normalized.get(name, "")
    if not _ID_PATTERN.fullmatch(value):
        raise InvalidEvent(f"Column {name!r} must be a non-negative integer, got {value!r}", line_number)
    parsed = int(value)
    if not 0 <= parsed <= maximum:
        raise InvalidEvent(f"Column {name!r} out of range 0..{maximum}: {parsed}", line_number)
    return parsed


def format_account_row(account: ClientAccount) -> Dict[str, str]:
    return {
        "client": str(account.client_id),
        "available": str(account.available),
        "held": str(account.held),
        "total": str(account.total),
        "locked": str(account.locked).lower(),
    }


def write_accounts(accounts: Dict[int, ClientAccount], stream: TextIO) -> None:
    """Write final account states as CSV, in the mapping's iteration order."""
    writer = csv.DictWriter(stream, fieldnames=OUTPUT_FIELDS, lineterminator="\n")
    writer.writeheader()
    for account in accounts.values():
        writer.writerow(format_account_row(account))
