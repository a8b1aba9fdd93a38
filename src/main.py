import logging
import sys

from pydantic import ValidationError

from account_report import write_accounts
from config import get_config
from errors import LedgerError
from payments_engine import PaymentsEngine


def main():
    try:
        config = get_config()
    except ValidationError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=config.log_level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if len(sys.argv) != 2:
        print("Usage: payments-ledger <input.csv>", file=sys.stderr)
        sys.exit(1)

    filepath = sys.argv[1]
    engine = PaymentsEngine(
        max_transactions=config.max_transactions,
        report_stats=config.report_stats,
    )

    try:
        accounts = engine.process_file(filepath)
    except OSError as e:
        print(f"Error: cannot read {filepath}: {e}", file=sys.stderr)
        sys.exit(1)
    except LedgerError as e:
        # Per-entry errors never get here, only an invalid header does.
        print(f"Error: {filepath}: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        write_accounts(accounts, sys.stdout)
    except OSError as e:
        print(f"Error: cannot write output: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
