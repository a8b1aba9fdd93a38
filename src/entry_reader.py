"""
CSV input adapter.

Turns ``type, client, tx, amount`` rows into FundMovement or Operation
entries. Whitespace around fields is ignored, as are blank lines and lines
starting with ``#``. The amount column may be left off entirely.
"""

import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from errors import MalformedEntry, MissingAmount
from models import MAX_AMOUNT_DIGITS, Entry, FundMovement, FundMovementKind, Operation, OperationKind

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")
AMOUNT_COLUMN = "amount"

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

Row = Dict[Optional[str], str]


def read_rows(lines: Iterable[str]) -> Iterator[Tuple[int, Row]]:
    """
    Yield (line_number, row) for every data row.

    Rows are keyed by the normalized header names. Fields beyond the header
    are collected under the ``None`` key, the way csv.DictReader does it.
    Raises MalformedEntry if the header lacks a required column.
    """
    header: Optional[List[str]] = None

    for line_number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        fields = [field.strip() for field in next(csv.reader([stripped]))]

        if header is None:
            header = [name.lower() for name in fields]
            missing = [name for name in REQUIRED_COLUMNS if name not in header]
            if missing:
                raise MalformedEntry("input header is missing columns", {"line": line_number, "missing": missing})
            logger.debug(f"Input header: {header}")
            continue

        row: Row = dict(zip(header, fields))
        if len(fields) > len(header):
            row[None] = fields[len(header):]
        yield line_number, row


def parse_row(row: Row) -> Entry:
    """Parse a normalized row into an entry, raising MalformedEntry or MissingAmount."""
    if row.get(None):
        raise MalformedEntry("row has more columns than the header", {"row": row})

    kind_str = (row.get("type") or "").lower()
    client_id = _parse_id(row.get("client"), MAX_CLIENT_ID, "client", row)
    transaction_id = _parse_id(row.get("tx"), MAX_TRANSACTION_ID, "tx", row)

    try:
        fund_kind = FundMovementKind(kind_str)
    except ValueError:
        fund_kind = None

    if fund_kind is not None:
        amount = _parse_amount(row.get(AMOUNT_COLUMN), row)
        if amount is None:
            raise MissingAmount(
                f"{fund_kind.value} has no amount",
                {"client": client_id, "tx": transaction_id},
            )
        return FundMovement(
            kind=fund_kind,
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
        )

    try:
        operation_kind = OperationKind(kind_str)
    except ValueError:
        raise MalformedEntry("unknown entry type", {"type": kind_str or None, "row": row})

    # Operations act on the stored amount; any amount on the row is ignored.
    return Operation(
        kind=operation_kind,
        client_id=client_id,
        transaction_id=transaction_id,
    )


def _parse_id(text: Optional[str], upper_bound: int, column: str, row: Row) -> int:
    if not text or not (text.isascii() and text.isdigit()):
        raise MalformedEntry(f"invalid {column} id", {column: text, "row": row})

    value = int(text)
    if value > upper_bound:
        raise MalformedEntry(f"{column} id out of range", {column: value, "max": upper_bound})
    return value


def _parse_amount(text: Optional[str], row: Row) -> Optional[Decimal]:
    if not text:
        return None

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise MalformedEntry("invalid amount", {"amount": text, "row": row})

    if not amount.is_finite() or amount < 0:
        raise MalformedEntry("amount must be a finite non-negative decimal", {"amount": text, "row": row})

    # Digits from the leading integer digit down to the last fractional one.
    width = max(amount.adjusted() + 1, 1) + max(-amount.as_tuple().exponent, 0)
    if width > MAX_AMOUNT_DIGITS:
        raise MalformedEntry(
            "amount has too many digits",
            {"amount": text, "digits": width, "max": MAX_AMOUNT_DIGITS},
        )
    return amount
