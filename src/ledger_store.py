import logging
from collections import OrderedDict
from typing import Dict, Optional

from errors import DuplicateTransactionId
from models import ClientAccount, TransactionRecord, TransactionStatus

logger = logging.getLogger(__name__)


class LedgerStore:
    """
    Owns client accounts and the deposit/withdrawal history used for dispute lookups.
    Single-writer: the caller applies entries one at a time, in arrival order.
    """

    def __init__(self, max_transactions: Optional[int] = None):
        if max_transactions is not None and max_transactions < 1:
            raise ValueError(f"max_transactions must be positive, got {max_transactions}")

        self._accounts: Dict[int, ClientAccount] = {}
        # Insertion order doubles as age order for retention eviction.
        self._transactions: "OrderedDict[int, TransactionRecord]" = OrderedDict()
        self._max_transactions = max_transactions

    @property
    def transaction_count(self) -> int:
        return len(self._transactions)

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        """Retrieve an account without creating it."""
        return self._accounts.get(client_id)

    def insert_transaction(self, record: TransactionRecord) -> None:
        """Store transaction for future dispute lookups. Ids are never overwritten."""
        if record.transaction_id in self._transactions:
            raise DuplicateTransactionId(
                "transaction id already used",
                {"tx": record.transaction_id, "client": record.client_id},
            )

        self._transactions[record.transaction_id] = record
        self._enforce_retention(keep=record.transaction_id)

    def get_transaction(self, transaction_id: int) -> Optional[TransactionRecord]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)

    def _enforce_retention(self, keep: int) -> None:
        """
        Evict the oldest records once the retention limit is exceeded.
        Disputed records hold funds and are skipped, as is the record just inserted.
        """
        if self._max_transactions is None:
            return

        while len(self._transactions) > self._max_transactions:
            evictable = next(
                (
                    transaction_id
                    for transaction_id, record in self._transactions.items()
                    if transaction_id != keep and record.status != TransactionStatus.DISPUTED
                ),
                None,
            )
            if evictable is None:
                logger.warning(
                    f"Retention limit {self._max_transactions} exceeded but all "
                    f"{len(self._transactions) - 1} older stored transactions are disputed"
                )
                return

            del self._transactions[evictable]
            logger.debug(f"Evicted tx {evictable} from transaction history")
