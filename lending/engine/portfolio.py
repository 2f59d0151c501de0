"""Loan status classification and portfolio statistics."""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Iterator

from lending.config import DEFAULT_PENALTY_DAILY_RATE
from lending.engine.ledger import outstanding_amount
from lending.engine.money import ZERO
from lending.engine.penalty import as_datetime, compute_penalty, is_overdue
from lending.models.base import DateRange
from lending.models.lending import Installment, Loan, LoanStatus


@dataclass(frozen=True)
class MonthlyCashFlow:
    """Money lent versus money received in one calendar month."""

    year: int
    month: int
    money_out: Decimal
    money_in: Decimal

    @property
    def net(self) -> Decimal:
        return self.money_in - self.money_out

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class PortfolioStats:
    """Portfolio-level figures as of a given moment."""

    as_of: datetime
    date_range: DateRange
    loan_count: int
    active_count: int
    overdue_count: int
    settled_count: int
    principal_lent: Decimal
    principal_outstanding: Decimal  # principal of loans not yet settled
    amount_receivable: Decimal  # nominal value still owed on pending installments
    amount_receivable_with_penalty: Decimal
    accrued_penalties: Decimal
    total_received: Decimal
    received_in_range: Decimal  # by actual payment date
    monthly: list[MonthlyCashFlow] = field(default_factory=list)


def classify_loan(loan: Loan, as_of: date | datetime) -> LoanStatus:
    """SETTLED if every installment is paid, else OVERDUE if any is overdue, else ACTIVE."""
    all_paid = True
    any_overdue = False
    for installment in loan.installments:
        if not installment.is_paid:
            all_paid = False
            if is_overdue(installment, as_of):
                any_overdue = True
                break

    if all_paid:
        return LoanStatus.SETTLED
    return LoanStatus.OVERDUE if any_overdue else LoanStatus.ACTIVE


def amount_received(installment: Installment) -> Decimal:
    """Cash received against an installment, partial payments included."""
    return installment.paid_amount or ZERO


def iter_receipts(loans: Iterable[Loan]) -> Iterator[tuple[datetime, Decimal]]:
    """Yield ``(paid_at, amount)`` for every amount received.

    Installments loaded without a payment history fall back to their
    ``paid_at`` and cumulative amount.
    """
    for loan in loans:
        for installment in loan.installments:
            if installment.payments:
                for payment in installment.payments:
                    yield payment.paid_at, payment.amount
            elif installment.paid_at is not None and installment.paid_amount:
                yield installment.paid_at, installment.paid_amount


def received_between(loans: Iterable[Loan], date_range: DateRange) -> Decimal:
    """Sum of receipts whose payment date falls in ``date_range``."""
    return sum(
        (amount for paid_at, amount in iter_receipts(loans) if date_range.contains(paid_at)),
        ZERO,
    )


def _months(start: date, end: date) -> Iterator[tuple[int, int]]:
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        yield year, month
        month += 1
        if month > 12:
            year, month = year + 1, 1


def monthly_cash_flow(loans: Iterable[Loan], start: date, end: date) -> list[MonthlyCashFlow]:
    """Month-by-month money out (loans originated) versus money in (receipts).

    Parameters
    ----------
    loans : Iterable[Loan]
        Loans to aggregate.
    start, end : date
        Any day in the first and last month of the series.

    Returns
    -------
    list[MonthlyCashFlow]
        One entry per month, oldest first, including empty months.
    """
    loans = list(loans)
    money_out: dict[tuple[int, int], Decimal] = defaultdict(lambda: ZERO)
    money_in: dict[tuple[int, int], Decimal] = defaultdict(lambda: ZERO)

    for loan in loans:
        money_out[(loan.created_at.year, loan.created_at.month)] += loan.principal
    for paid_at, amount in iter_receipts(loans):
        money_in[(paid_at.year, paid_at.month)] += amount

    return [
        MonthlyCashFlow(
            year=year,
            month=month,
            money_out=money_out[(year, month)],
            money_in=money_in[(year, month)],
        )
        for year, month in _months(start, end)
    ]


def _series_bounds(loans: list[Loan], date_range: DateRange, as_of: datetime) -> tuple[date, date] | None:
    end = date_range.end or as_of.date()
    start = date_range.start
    if start is None:
        activity = [loan.created_at.date() for loan in loans]
        activity.extend(paid_at.date() for paid_at, _ in iter_receipts(loans))
        if not activity:
            return None
        start = min(activity)
    if start > end:
        return None
    return start, end


def aggregate_portfolio(
    loans: Iterable[Loan],
    date_range: DateRange | None = None,
    as_of: date | datetime | None = None,
    daily_rate: Decimal = DEFAULT_PENALTY_DAILY_RATE,
) -> PortfolioStats:
    """Compute portfolio statistics.

    Parameters
    ----------
    loans : Iterable[Loan]
        Loans in the portfolio.
    date_range : DateRange | None
        Window for ``received_in_range`` and the monthly series. An open
        start begins the series at the earliest activity; an open end stops
        it at ``as_of``.
    as_of : date | datetime | None
        Moment for overdue status and penalties (default: now).
    daily_rate : Decimal
        Penalty rate per day overdue.

    Returns
    -------
    PortfolioStats
        Aggregated figures.
    """
    loans = list(loans)
    date_range = date_range or DateRange()
    moment = as_datetime(as_of or datetime.now())

    counts = {status: 0 for status in LoanStatus}
    principal_lent = ZERO
    principal_outstanding = ZERO
    receivable = ZERO
    receivable_with_penalty = ZERO
    penalties = ZERO
    total_received = ZERO

    for loan in loans:
        status = classify_loan(loan, moment)
        counts[status] += 1
        principal_lent += loan.principal
        if status != LoanStatus.SETTLED:
            principal_outstanding += loan.principal

        for installment in loan.installments:
            total_received += amount_received(installment)
            if not installment.is_paid:
                receivable += max(installment.value - amount_received(installment), ZERO)
                receivable_with_penalty += outstanding_amount(installment, moment, daily_rate)
                penalties += compute_penalty(installment, moment, daily_rate)

    bounds = _series_bounds(loans, date_range, moment)
    monthly = monthly_cash_flow(loans, *bounds) if bounds else []

    return PortfolioStats(
        as_of=moment,
        date_range=date_range,
        loan_count=len(loans),
        active_count=counts[LoanStatus.ACTIVE],
        overdue_count=counts[LoanStatus.OVERDUE],
        settled_count=counts[LoanStatus.SETTLED],
        principal_lent=principal_lent,
        principal_outstanding=principal_outstanding,
        amount_receivable=receivable,
        amount_receivable_with_penalty=receivable_with_penalty,
        accrued_penalties=penalties,
        total_received=total_received,
        received_in_range=received_between(loans, date_range),
        monthly=monthly,
    )


def filter_loans(
    loans: Iterable[Loan],
    statuses: Iterable[LoanStatus] | None = None,
    due_range: DateRange | None = None,
    as_of: date | datetime | None = None,
) -> list[Loan]:
    """Loans whose status is in ``statuses`` and with any due date inside ``due_range``."""
    moment = as_datetime(as_of or datetime.now())
    wanted = set(statuses) if statuses is not None else set(LoanStatus)

    result = []
    for loan in loans:
        if classify_loan(loan, moment) not in wanted:
            continue
        if due_range is not None and not any(
            due_range.contains(inst.due_date) for inst in loan.installments
        ):
            continue
        result.append(loan)
    return result

