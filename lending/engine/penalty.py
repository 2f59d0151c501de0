"""Overdue penalty (mora) accrual and derived installment status."""

from datetime import date, datetime, time
from decimal import Decimal

from lending.config import DEFAULT_PENALTY_DAILY_RATE
from lending.engine.money import ZERO, to_money
from lending.models.lending import DisplayStatus, Installment


def as_datetime(as_of: date | datetime) -> datetime:
    """Treat a bare date as the start of that day.

    Aware datetimes are converted to naive local time, the clock due dates
    are kept in.
    """
    if isinstance(as_of, datetime):
        if as_of.tzinfo is not None:
            return as_of.astimezone().replace(tzinfo=None)
        return as_of
    return datetime.combine(as_of, time.min)


def days_overdue(due_date: date, as_of: date | datetime) -> int:
    """Whole days elapsed since the start of the due date, fractions rounded up.

    Zero while the as-of calendar day is on or before the due date.
    """
    moment = as_datetime(as_of)
    if moment.date() <= due_date:
        return 0
    elapsed = moment - datetime.combine(due_date, time.min)
    return elapsed.days + (1 if elapsed.seconds or elapsed.microseconds else 0)


def compute_penalty(
    installment: Installment,
    as_of: date | datetime,
    daily_rate: Decimal = DEFAULT_PENALTY_DAILY_RATE,
) -> Decimal:
    """Accrued late fee of a PENDING installment as of ``as_of``.

    Simple linear interest on the original value, ``daily_rate`` per day
    overdue, uncapped. PAID installments accrue nothing; their fee was frozen
    into ``penalty_applied`` at settlement.
    """
    if installment.is_paid:
        return ZERO
    days = days_overdue(installment.due_date, as_of)
    if days == 0:
        return ZERO
    return to_money(installment.value * daily_rate * days)


def is_overdue(installment: Installment, as_of: date | datetime) -> bool:
    """PENDING and past its due date; never a stored status."""
    return not installment.is_paid and installment.due_date < as_datetime(as_of).date()


def display_status(installment: Installment, as_of: date | datetime) -> DisplayStatus:
    if installment.is_paid:
        return DisplayStatus.PAID
    if is_overdue(installment, as_of):
        return DisplayStatus.OVERDUE
    return DisplayStatus.PENDING
