from collections import Counter
from dataclasses import dataclass
from decimal import Context, Decimal
from enum import Enum
from typing import Union

# Balance arithmetic runs in this context. Amounts are capped at MAX_AMOUNT_DIGITS
# digits on input, so sums stay exact for any realistic stream length.
LEDGER_PRECISION = 96
LEDGER_CONTEXT = Context(prec=LEDGER_PRECISION)
MAX_AMOUNT_DIGITS = 48


class FundMovementKind(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class OperationKind(Enum):
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class TransactionStatus(Enum):
    NEW = "new"
    PROCESSED = "processed"
    FAILED = "failed"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"


@dataclass(frozen=True)
class FundMovement:
    kind: FundMovementKind
    client_id: int
    transaction_id: int
    amount: Decimal

    def __repr__(self) -> str:
        return f"FundMovement({self.kind.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass(frozen=True)
class Operation:
    kind: OperationKind
    client_id: int
    transaction_id: int

    def __repr__(self) -> str:
        return f"Operation({self.kind.value}, client={self.client_id}, tx={self.transaction_id})"


Entry = Union[FundMovement, Operation]


@dataclass
class TransactionRecord:
    """Stored deposit or withdrawal, the only entries an operation can reference."""

    kind: FundMovementKind
    client_id: int
    transaction_id: int
    amount: Decimal
    status: TransactionStatus = TransactionStatus.NEW

    @classmethod
    def from_fund_movement(cls, movement: FundMovement) -> "TransactionRecord":
        return cls(
            kind=movement.kind,
            client_id=movement.client_id,
            transaction_id=movement.transaction_id,
            amount=movement.amount,
        )


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return LEDGER_CONTEXT.add(self.available, self.held)

    def credit(self, amount: Decimal) -> None:
        self.available = LEDGER_CONTEXT.add(self.available, amount)

    def debit(self, amount: Decimal) -> None:
        self.available = LEDGER_CONTEXT.subtract(self.available, amount)

    def hold(self, amount: Decimal) -> None:
        self.available = LEDGER_CONTEXT.subtract(self.available, amount)
        self.held = LEDGER_CONTEXT.add(self.held, amount)

    def release_hold(self, amount: Decimal) -> None:
        self.held = LEDGER_CONTEXT.subtract(self.held, amount)
        self.available = LEDGER_CONTEXT.add(self.available, amount)

    def remove_held(self, amount: Decimal) -> None:
        self.held = LEDGER_CONTEXT.subtract(self.held, amount)

    def lock(self) -> None:
        self.locked = True


class ProcessingStats:
    """Counters for one engine run."""

    def __init__(self):
        self.processed = 0
        self.failed = 0
        self.failures_by_error: Counter = Counter()

    def record_success(self) -> None:
        self.processed += 1

    def record_failure(self, error: Exception) -> None:
        self.failed += 1
        self.failures_by_error[type(error).__name__] += 1

    def summary(self) -> str:
        return f"Processed: {self.processed}, Failed: {self.failed}"
