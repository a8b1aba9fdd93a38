import logging
import sys
from typing import Dict, Iterable, Optional

from entry_processor import EntryProcessor
from entry_reader import parse_row, read_rows
from errors import AccountMissing, InsufficientHeldFunds, LedgerError
from ledger_store import LedgerStore
from models import ClientAccount, ProcessingStats

logger = logging.getLogger(__name__)

# Failures that mean the ledger itself is inconsistent, not that the input was bad.
INTERNAL_ERRORS = (AccountMissing, InsufficientHeldFunds)


class PaymentsEngine:
    """
    Applies a CSV entry stream to a ledger, strictly in arrival order.
    Rejected entries are logged and skipped; only I/O errors end the run early.
    """

    def __init__(self, max_transactions: Optional[int] = None, report_stats: bool = True):
        self._store = LedgerStore(max_transactions=max_transactions)
        self._processor = EntryProcessor(self._store)
        self._stats = ProcessingStats()
        self._report_stats = report_stats

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    @property
    def store(self) -> LedgerStore:
        return self._store

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing {filepath}")

        # Undecodable bytes become U+FFFD so the row fails to parse instead of the whole read.
        with open(filepath, "r", encoding="utf-8", errors="replace", newline="") as f:
            self.process_lines(f)

        logger.info("Processing complete")

        if self._report_stats:
            print(self._stats.summary(), file=sys.stderr)

        return self._store.get_all_accounts()

    def process_lines(self, lines: Iterable[str]) -> Dict[int, ClientAccount]:
        """Apply every data row in lines and return the current account states."""
        for line_number, row in read_rows(lines):
            try:
                entry = parse_row(row)
                self._processor.process_entry(entry)
            except INTERNAL_ERRORS as e:
                self._stats.record_failure(e)
                logger.error(f"Line {line_number}: ledger inconsistency: {e}")
            except LedgerError as e:
                self._stats.record_failure(e)
                logger.warning(f"Line {line_number}: skipped {type(e).__name__}: {e}")
            else:
                self._stats.record_success()

        return self._store.get_all_accounts()
