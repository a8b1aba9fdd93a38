import csv
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, TextIO

from errors import MalformedEntry
from models import LEDGER_CONTEXT, ClientAccount

REPORT_HEADER = ("client", "available", "held", "total", "locked")
LOCKED_VALUES = {"true": True, "false": False}


def format_decimal(value: Decimal) -> str:
    """Format decimal exactly, removing trailing zeros and never using an exponent."""
    normalized = value.normalize(LEDGER_CONTEXT)
    if normalized.is_zero():
        return "0"
    return f"{normalized:f}"


def format_account(account: ClientAccount) -> str:
    return (
        f"{account.client_id},"
        f"{format_decimal(account.available)},"
        f"{format_decimal(account.held)},"
        f"{format_decimal(account.total)},"
        f"{str(account.locked).lower()}"
    )


def write_accounts(accounts: Dict[int, ClientAccount], stream: TextIO) -> None:
    """Write the account snapshot, sorted by client id."""
    print(",".join(REPORT_HEADER), file=stream)
    for client_id in sorted(accounts.keys()):
        print(format_account(accounts[client_id]), file=stream)


def read_accounts(lines: Iterable[str]) -> Dict[int, ClientAccount]:
    """
    Parse a snapshot written by write_accounts back into accounts.
    Raises MalformedEntry for rows with missing, extra or unparseable columns,
    and for rows whose total does not match available + held.
    """
    accounts: Dict[int, ClientAccount] = {}
    reader = csv.DictReader(line for line in lines if line.strip())

    for row in reader:
        if None in row or None in row.values():
            raise MalformedEntry("snapshot row does not match the header", {"row": row})

        normalized = {k.strip(): v.strip() for k, v in row.items()}
        try:
            account = ClientAccount(
                client_id=int(normalized["client"]),
                available=Decimal(normalized["available"]),
                held=Decimal(normalized["held"]),
                locked=LOCKED_VALUES[normalized["locked"]],
            )
            total = Decimal(normalized["total"])
        except (KeyError, ValueError, InvalidOperation) as e:
            raise MalformedEntry("invalid snapshot row", {"row": normalized, "error": repr(e)}) from e

        if account.total != total:
            raise MalformedEntry("total does not match available + held", {"row": normalized})
        accounts[account.client_id] = account

    return accounts
