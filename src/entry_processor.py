import logging

from errors import (
    AccountLocked,
    AccountMissing,
    CrossClientOperation,
    DuplicateTransactionId,
    InsufficientFunds,
    InsufficientHeldFunds,
    InvalidStateForOperation,
    LedgerError,
    TransactionNotFound,
)
from ledger_store import LedgerStore
from models import (
    ClientAccount,
    Entry,
    FundMovement,
    FundMovementKind,
    Operation,
    OperationKind,
    TransactionRecord,
    TransactionStatus,
)

logger = logging.getLogger(__name__)

DISPUTABLE_STATUSES = (TransactionStatus.PROCESSED, TransactionStatus.RESOLVED)


class EntryProcessor:
    """
    Applies entries to a LedgerStore.
    Raises a LedgerError subclass when an entry is rejected; a rejected entry
    leaves balances untouched. Holds no state besides the store.
    """

    def __init__(self, store: LedgerStore):
        self._store = store

    def process_entry(self, entry: Entry) -> None:
        match entry:
            case FundMovement():
                self._apply_fund_movement(entry)
            case Operation():
                self._apply_operation(entry)
            case _:
                raise LedgerError("unsupported entry", {"entry": entry})

    def _apply_fund_movement(self, movement: FundMovement) -> None:
        if self._store.get_transaction(movement.transaction_id) is not None:
            raise DuplicateTransactionId(
                f"{movement.kind.value} reuses an existing transaction id",
                {"tx": movement.transaction_id, "client": movement.client_id},
            )

        account = self._store.get_or_create_account(movement.client_id)

        if account.locked:
            raise AccountLocked(
                f"{movement.kind.value} rejected, account is locked",
                {"tx": movement.transaction_id, "client": movement.client_id},
            )

        record = TransactionRecord.from_fund_movement(movement)
        self._store.insert_transaction(record)

        match movement.kind:
            case FundMovementKind.DEPOSIT:
                self._handle_deposit(account, record)
            case FundMovementKind.WITHDRAWAL:
                self._handle_withdrawal(account, record)

    def _handle_deposit(self, account: ClientAccount, record: TransactionRecord) -> None:
        account.credit(record.amount)
        record.status = TransactionStatus.PROCESSED

    def _handle_withdrawal(self, account: ClientAccount, record: TransactionRecord) -> None:
        # Failed withdrawals stay stored so the id remains reserved.
        if account.available < record.amount:
            record.status = TransactionStatus.FAILED
            raise InsufficientFunds(
                "withdrawal exceeds available funds",
                {
                    "tx": record.transaction_id,
                    "client": record.client_id,
                    "amount": record.amount,
                    "available": account.available,
                },
            )

        account.debit(record.amount)
        record.status = TransactionStatus.PROCESSED

    def _apply_operation(self, operation: Operation) -> None:
        record = self._store.get_transaction(operation.transaction_id)

        if record is None:
            raise TransactionNotFound(
                f"{operation.kind.value} references unknown transaction",
                {"tx": operation.transaction_id, "client": operation.client_id},
            )

        if record.client_id != operation.client_id:
            raise CrossClientOperation(
                f"{operation.kind.value} references another client's transaction",
                {"tx": operation.transaction_id, "client": operation.client_id, "owner": record.client_id},
            )

        account = self._store.get_account(record.client_id)
        if account is None:
            raise AccountMissing(
                "stored transaction has no account",
                {"tx": record.transaction_id, "client": record.client_id},
            )

        match operation.kind:
            case OperationKind.DISPUTE:
                self._handle_dispute(account, record)
            case OperationKind.RESOLVE:
                self._handle_resolve(account, record)
            case OperationKind.CHARGEBACK:
                self._handle_chargeback(account, record)

    def _handle_dispute(self, account: ClientAccount, record: TransactionRecord) -> None:
        if record.status not in DISPUTABLE_STATUSES:
            raise InvalidStateForOperation(
                f"cannot dispute a {record.status.value} transaction",
                {"tx": record.transaction_id, "client": record.client_id},
            )

        account.hold(record.amount)
        record.status = TransactionStatus.DISPUTED

    def _handle_resolve(self, account: ClientAccount, record: TransactionRecord) -> None:
        self._check_releasable(account, record, OperationKind.RESOLVE)

        account.release_hold(record.amount)
        record.status = TransactionStatus.RESOLVED

    def _handle_chargeback(self, account: ClientAccount, record: TransactionRecord) -> None:
        self._check_releasable(account, record, OperationKind.CHARGEBACK)

        account.remove_held(record.amount)
        account.lock()
        record.status = TransactionStatus.CHARGED_BACK
        logger.info(f"Account {account.client_id} locked by chargeback of tx {record.transaction_id}")

    def _check_releasable(self, account: ClientAccount, record: TransactionRecord, kind: OperationKind) -> None:
        if record.status != TransactionStatus.DISPUTED:
            raise InvalidStateForOperation(
                f"cannot {kind.value} a {record.status.value} transaction",
                {"tx": record.transaction_id, "client": record.client_id},
            )

        if account.held < record.amount:
            raise InsufficientHeldFunds(
                f"held funds below disputed amount on {kind.value}",
                {
                    "tx": record.transaction_id,
                    "client": record.client_id,
                    "amount": record.amount,
                    "held": account.held,
                },
            )
