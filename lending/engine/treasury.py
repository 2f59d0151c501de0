"""Treasury: available cash from manual movements and loan flows.

    balance = (contributions + total received) - (withdrawals + principal lent)

All four terms are live sums; nothing is stored. RECEIPT and REVERSAL
journal entries only mirror ledger activity and never enter the formula,
since installment receipts are already counted through the loans.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from lending.engine.ledger import LedgerUpdate
from lending.engine.money import ZERO, to_decimal, to_money
from lending.engine.portfolio import amount_received
from lending.exceptions import InvalidCashMovementError
from lending.models.lending import CashMovement, CashMovementType, Loan

MANUAL_TYPES = (CashMovementType.CONTRIBUTION, CashMovementType.WITHDRAWAL)


@dataclass(frozen=True)
class TreasurySummary:
    contributions: Decimal
    withdrawals: Decimal
    total_received: Decimal
    principal_lent: Decimal
    balance: Decimal


def record_cash_movement(
    movement_type: CashMovementType | str,
    amount: Decimal,
    description: str,
    created_at: datetime | None = None,
    movement_id: str | None = None,
) -> CashMovement:
    """Build a manual contribution or withdrawal.

    Raises
    ------
    InvalidCashMovementError
        If the type is not CONTRIBUTION/WITHDRAWAL, the amount is not
        positive, or the description is blank.
    """
    try:
        kind = CashMovementType(movement_type)
    except ValueError as exc:
        raise InvalidCashMovementError(f"Unknown cash movement type: {movement_type!r}") from exc
    if kind not in MANUAL_TYPES:
        raise InvalidCashMovementError(f"{kind.value} entries are written by the ledger, not recorded by hand")

    value = to_decimal(amount)
    if value is None or to_money(value) <= ZERO:
        raise InvalidCashMovementError(f"Cash movement amount must be positive, got {amount!r}")

    if not description or not description.strip():
        raise InvalidCashMovementError("Cash movement description is required")

    return CashMovement(
        movement_id=movement_id or str(uuid.uuid4()),
        movement_type=kind,
        amount=to_money(value),
        description=description.strip(),
        created_at=created_at or datetime.now(),
    )


def receipt_movement(update: LedgerUpdate) -> CashMovement | None:
    """Journal entry for the cash received by a payment transition."""
    if not update.applied or update.payment is None or update.payment.amount <= ZERO:
        return None
    loan = update.loan
    return CashMovement(
        movement_id=str(uuid.uuid4()),
        movement_type=CashMovementType.RECEIPT,
        amount=update.payment.amount,
        description=f"Contract #{loan.contract_number} installment {update.installment.number}",
        created_at=update.payment.paid_at,
        loan_id=loan.loan_id,
    )


def reversal_movement(update: LedgerUpdate, reversed_at: datetime | None = None) -> CashMovement | None:
    """Journal entry for the amount undone by a reversal."""
    refunded = update.previous.paid_amount or ZERO
    if not update.applied or refunded <= ZERO:
        return None
    loan = update.loan
    return CashMovement(
        movement_id=str(uuid.uuid4()),
        movement_type=CashMovementType.REVERSAL,
        amount=refunded,
        description=f"Reversal: contract #{loan.contract_number} installment {update.installment.number}",
        created_at=reversed_at or datetime.now(),
        loan_id=loan.loan_id,
    )


def _sum_type(movements: list[CashMovement], kind: CashMovementType) -> Decimal:
    return sum((m.amount for m in movements if m.movement_type == kind), ZERO)


def treasury_summary(movements: Iterable[CashMovement], loans: Iterable[Loan]) -> TreasurySummary:
    movements = list(movements)
    loans = list(loans)

    contributions = _sum_type(movements, CashMovementType.CONTRIBUTION)
    withdrawals = _sum_type(movements, CashMovementType.WITHDRAWAL)
    principal_lent = sum((loan.principal for loan in loans), ZERO)
    total_received = sum(
        (amount_received(inst) for loan in loans for inst in loan.installments),
        ZERO,
    )

    return TreasurySummary(
        contributions=contributions,
        withdrawals=withdrawals,
        total_received=total_received,
        principal_lent=principal_lent,
        balance=(contributions + total_received) - (withdrawals + principal_lent),
    )


def compute_balance(movements: Iterable[CashMovement], loans: Iterable[Loan]) -> Decimal:
    """Available cash; see the module docstring for the formula."""
    return treasury_summary(movements, loans).balance
