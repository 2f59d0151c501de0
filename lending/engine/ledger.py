"""Installment payment state machine.

An installment is PENDING until it is settled, either in one step or by the
partial payment that brings the cumulative amount up to its value plus the
penalty accrued at that moment. PAID is terminal except for an explicit
reversal, which puts the installment back to PENDING and clears every
payment field.

Every transition returns a new ``Loan``; the loan passed in is never
modified. Transitions that make no sense for the current state (paying a
PAID installment, reversing a PENDING one) are not errors: they come back
with ``applied=False`` and the loan unchanged.
"""

import dataclasses
import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from lending.config import DEFAULT_PENALTY_DAILY_RATE
from lending.engine.money import ZERO, to_decimal, to_money
from lending.engine.penalty import as_datetime, compute_penalty
from lending.exceptions import InstallmentNotFoundError, InvalidPaymentError
from lending.logging import log_fields
from lending.models.lending import Installment, InstallmentStatus, Loan, PaymentRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerUpdate:
    """Outcome of a ledger transition."""

    loan: Loan
    installment: Installment  # state after the call
    previous: Installment  # state before the call
    applied: bool
    reason: str | None = None
    payment: PaymentRecord | None = None  # amount received by this call


def _get_installment(loan: Loan, installment_id: str) -> Installment:
    installment = loan.find_installment(installment_id)
    if installment is None:
        raise InstallmentNotFoundError(
            f"Installment {installment_id} not found in loan {loan.loan_id}"
        )
    return installment


def _with_installment(loan: Loan, updated: Installment) -> Loan:
    installments = [
        updated if inst.installment_id == updated.installment_id else inst
        for inst in loan.installments
    ]
    return dataclasses.replace(loan, installments=installments)


def _log_fields(loan: Loan, installment: Installment) -> dict:
    return log_fields(loan_id=loan.loan_id, contract=loan.contract_number, installment=installment.number)


def _refused(loan: Loan, installment: Installment, reason: str) -> LedgerUpdate:
    logger.warning(
        "Ignored ledger operation on contract %d installment %d: %s",
        loan.contract_number,
        installment.number,
        reason,
        extra=_log_fields(loan, installment),
    )
    return LedgerUpdate(
        loan=loan,
        installment=installment,
        previous=installment,
        applied=False,
        reason=reason,
    )


def amount_due(
    installment: Installment,
    as_of: date | datetime,
    daily_rate: Decimal = DEFAULT_PENALTY_DAILY_RATE,
) -> Decimal:
    """Original value plus penalty; frozen at the settlement snapshot once PAID."""
    if installment.is_paid:
        return installment.value + (installment.penalty_applied or ZERO)
    return installment.value + compute_penalty(installment, as_of, daily_rate)


def outstanding_amount(
    installment: Installment,
    as_of: date | datetime,
    daily_rate: Decimal = DEFAULT_PENALTY_DAILY_RATE,
) -> Decimal:
    """What is still needed to settle the installment right now."""
    if installment.is_paid:
        return ZERO
    remaining = amount_due(installment, as_of, daily_rate) - (installment.paid_amount or ZERO)
    return max(remaining, ZERO)


def settle_installment(
    loan: Loan,
    installment_id: str,
    as_of: date | datetime | None = None,
    daily_rate: Decimal = DEFAULT_PENALTY_DAILY_RATE,
) -> LedgerUpdate:
    """Mark an installment fully paid.

    Parameters
    ----------
    loan : Loan
        Loan holding the installment.
    installment_id : str
        Installment to settle.
    as_of : date | datetime | None
        Payment moment (default: now). The penalty is computed as of this
        moment and frozen.
    daily_rate : Decimal
        Penalty rate per day overdue.

    Returns
    -------
    LedgerUpdate
        ``applied=False`` if the installment was already PAID.

    Raises
    ------
    InstallmentNotFoundError
        If the installment is not part of the loan.
    """
    installment = _get_installment(loan, installment_id)
    if installment.is_paid:
        return _refused(loan, installment, "installment is already paid")

    paid_at = as_datetime(as_of or datetime.now())
    penalty = compute_penalty(installment, paid_at, daily_rate)
    total_due = installment.value + penalty
    already_paid = installment.paid_amount or ZERO

    payment = PaymentRecord(
        record_id=str(uuid.uuid4()),
        paid_at=paid_at,
        amount=max(total_due - already_paid, ZERO),
        penalty=penalty,
    )
    settled = dataclasses.replace(
        installment,
        status=InstallmentStatus.PAID,
        paid_at=paid_at,
        penalty_applied=penalty,
        paid_amount=total_due,
        payments=[*installment.payments, payment],
    )

    logger.info(
        "Settled contract %d installment %d: %s (penalty %s)",
        loan.contract_number,
        installment.number,
        total_due,
        penalty,
        extra=_log_fields(loan, installment),
    )
    return LedgerUpdate(
        loan=_with_installment(loan, settled),
        installment=settled,
        previous=installment,
        applied=True,
        payment=payment,
    )


def reverse_installment(loan: Loan, installment_id: str) -> LedgerUpdate:
    """Undo a settlement, returning the installment to PENDING.

    Paid-at, penalty, cumulative paid amount and payment history are all
    cleared. Reversing a PENDING installment is ignored.

    Raises
    ------
    InstallmentNotFoundError
        If the installment is not part of the loan.
    """
    installment = _get_installment(loan, installment_id)
    if not installment.is_paid:
        return _refused(loan, installment, "only a paid installment can be reversed")

    reopened = dataclasses.replace(
        installment,
        status=InstallmentStatus.PENDING,
        paid_at=None,
        penalty_applied=None,
        paid_amount=None,
        payments=[],
    )

    logger.info(
        "Reversed contract %d installment %d (was %s)",
        loan.contract_number,
        installment.number,
        installment.paid_amount,
        extra=_log_fields(loan, installment),
    )
    return LedgerUpdate(
        loan=_with_installment(loan, reopened),
        installment=reopened,
        previous=installment,
        applied=True,
    )


def apply_partial_payment(
    loan: Loan,
    installment_id: str,
    amount: Decimal,
    as_of: date | datetime | None = None,
    daily_rate: Decimal = DEFAULT_PENALTY_DAILY_RATE,
) -> LedgerUpdate:
    """Apply a payment that may or may not cover the installment.

    The penalty is recomputed at this call. When the cumulative amount paid
    reaches the value plus that penalty, the installment becomes PAID on this
    call with the penalty frozen.

    ``amount`` is rounded half up to whole cents before it is applied, so
    10.005 is recorded as 10.01.

    Raises
    ------
    InvalidPaymentError
        If ``amount`` is not positive once rounded to cents.
    InstallmentNotFoundError
        If the installment is not part of the loan.
    """
    value = to_decimal(amount)
    if value is None or to_money(value) <= ZERO:
        raise InvalidPaymentError(f"Payment amount must be positive, got {amount!r}")
    value = to_money(value)

    installment = _get_installment(loan, installment_id)
    if installment.is_paid:
        return _refused(loan, installment, "installment is already paid")

    paid_at = as_datetime(as_of or datetime.now())
    penalty = compute_penalty(installment, paid_at, daily_rate)
    total_due = installment.value + penalty
    cumulative = (installment.paid_amount or ZERO) + value

    payment = PaymentRecord(
        record_id=str(uuid.uuid4()),
        paid_at=paid_at,
        amount=value,
        penalty=penalty,
    )

    if cumulative >= total_due:
        updated = dataclasses.replace(
            installment,
            status=InstallmentStatus.PAID,
            paid_at=paid_at,
            penalty_applied=penalty,
            paid_amount=cumulative,
            payments=[*installment.payments, payment],
        )
        logger.info(
            "Partial payment %s settled contract %d installment %d (%s of %s)",
            value,
            loan.contract_number,
            installment.number,
            cumulative,
            total_due,
            extra=_log_fields(loan, installment),
        )
    else:
        updated = dataclasses.replace(
            installment,
            paid_amount=cumulative,
            payments=[*installment.payments, payment],
        )
        logger.info(
            "Partial payment %s on contract %d installment %d (%s of %s)",
            value,
            loan.contract_number,
            installment.number,
            cumulative,
            total_due,
            extra=_log_fields(loan, installment),
        )

    return LedgerUpdate(
        loan=_with_installment(loan, updated),
        installment=updated,
        previous=installment,
        applied=True,
        payment=payment,
    )
