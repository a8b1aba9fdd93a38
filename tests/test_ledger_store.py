import sys
import os
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from errors import DuplicateTransactionId
from ledger_store import LedgerStore
from models import FundMovementKind, TransactionRecord, TransactionStatus


def make_record(transaction_id: int, client_id: int = 1, status=TransactionStatus.PROCESSED) -> TransactionRecord:
    return TransactionRecord(
        kind=FundMovementKind.DEPOSIT,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=Decimal("10"),
        status=status,
    )


class TestLedgerStore:
    def test_get_or_create_account_is_lazy_and_stable(self):
        store = LedgerStore()
        assert store.get_account(1) is None

        account = store.get_or_create_account(1)
        assert store.get_or_create_account(1) is account
        assert store.get_account(1) is account

    def test_insert_and_get_transaction(self):
        store = LedgerStore()
        record = make_record(5)
        store.insert_transaction(record)

        assert store.get_transaction(5) is record
        assert store.get_transaction(6) is None
        assert store.transaction_count == 1

    def test_duplicate_transaction_id_rejected(self):
        store = LedgerStore()
        original = make_record(5)
        store.insert_transaction(original)

        with pytest.raises(DuplicateTransactionId):
            store.insert_transaction(make_record(5, client_id=2))

        assert store.get_transaction(5) is original

    def test_get_all_accounts_is_a_copy(self):
        store = LedgerStore()
        store.get_or_create_account(1)
        snapshot = store.get_all_accounts()
        snapshot.clear()

        assert store.get_account(1) is not None


class TestRetention:
    def test_unbounded_by_default(self):
        store = LedgerStore()
        for transaction_id in range(100):
            store.insert_transaction(make_record(transaction_id))
        assert store.transaction_count == 100

    def test_evicts_oldest(self):
        store = LedgerStore(max_transactions=2)
        for transaction_id in (1, 2, 3):
            store.insert_transaction(make_record(transaction_id))

        assert store.transaction_count == 2
        assert store.get_transaction(1) is None
        assert store.get_transaction(2) is not None
        assert store.get_transaction(3) is not None

    def test_disputed_records_are_kept(self):
        store = LedgerStore(max_transactions=2)
        store.insert_transaction(make_record(1, status=TransactionStatus.DISPUTED))
        store.insert_transaction(make_record(2))
        store.insert_transaction(make_record(3))

        assert store.get_transaction(1) is not None
        assert store.get_transaction(2) is None
        assert store.get_transaction(3) is not None

    def test_new_record_kept_when_everything_older_is_disputed(self):
        store = LedgerStore(max_transactions=1)
        store.insert_transaction(make_record(1, status=TransactionStatus.DISPUTED))
        store.insert_transaction(make_record(2, status=TransactionStatus.NEW))

        assert store.get_transaction(1) is not None
        assert store.get_transaction(2) is not None
        assert store.transaction_count == 2

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            LedgerStore(max_transactions=0)
