"""Customer credit score derived from payment history."""

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from lending.engine.money import ZERO
from lending.engine.penalty import as_datetime, is_overdue
from lending.models.lending import Loan, ScoreBand

NEUTRAL_SCORE = 500
MIN_SCORE = 0
MAX_SCORE = 1000

ON_TIME_POINTS = 15
LATE_POINTS = 2  # paid late, but paid
OVERDUE_POINTS = -40
VOLUME_STEP = Decimal("2000")  # one point per 2000 borrowed

BAND_THRESHOLDS = [
    (800, ScoreBand.EXCELLENT),
    (600, ScoreBand.GOOD),
    (400, ScoreBand.FAIR),
]


@dataclass(frozen=True)
class CreditScore:
    """Score in [0, 1000] with its display band."""

    score: int
    band: ScoreBand


@dataclass(frozen=True)
class CustomerCreditSummary:
    """Payment-history figures shown on a customer's card."""

    score: CreditScore
    loan_count: int
    active_loan_count: int
    total_borrowed: Decimal
    installment_count: int
    paid_on_time: int
    paid_late: int
    currently_overdue: int
    punctuality_rate: int  # percent of installments paid
    delinquent: bool


def score_band(score: int) -> ScoreBand:
    for threshold, band in BAND_THRESHOLDS:
        if score >= threshold:
            return band
    return ScoreBand.CRITICAL


def _tally(loans: list[Loan], moment: datetime) -> tuple[int, int, int, int, Decimal]:
    on_time = late = overdue = total = 0
    borrowed = ZERO
    for loan in loans:
        borrowed += loan.principal
        for installment in loan.installments:
            total += 1
            if installment.is_paid:
                # No recorded payment date counts as on time
                if installment.paid_at is not None and installment.paid_at.date() > installment.due_date:
                    late += 1
                else:
                    on_time += 1
            elif is_overdue(installment, moment):
                overdue += 1
    return on_time, late, overdue, total, borrowed


def compute_credit_score(loans: Iterable[Loan], as_of: date | datetime | None = None) -> CreditScore:
    """Score a customer from every installment of every loan they hold.

    Starts at 500, adds 15 per installment paid on time and 2 per installment
    paid late, subtracts 40 per installment currently overdue, then adds one
    point per 2000 of principal borrowed, clamped to [0, 1000]. A customer
    with no loans scores exactly 500.
    """
    loans = list(loans)
    if not loans:
        return CreditScore(score=NEUTRAL_SCORE, band=score_band(NEUTRAL_SCORE))

    moment = as_datetime(as_of or datetime.now())
    on_time, late, overdue, _, borrowed = _tally(loans, moment)

    score = (
        NEUTRAL_SCORE
        + on_time * ON_TIME_POINTS
        + late * LATE_POINTS
        + overdue * OVERDUE_POINTS
        + math.floor(borrowed / VOLUME_STEP)
    )
    score = max(MIN_SCORE, min(MAX_SCORE, score))
    return CreditScore(score=score, band=score_band(score))


def summarize_customer(loans: Iterable[Loan], as_of: date | datetime | None = None) -> CustomerCreditSummary:
    loans = list(loans)
    moment = as_datetime(as_of or datetime.now())
    on_time, late, overdue, total, borrowed = _tally(loans, moment)
    paid = on_time + late

    return CustomerCreditSummary(
        score=compute_credit_score(loans, moment),
        loan_count=len(loans),
        active_loan_count=sum(
            1 for loan in loans if any(not inst.is_paid for inst in loan.installments)
        ),
        total_borrowed=borrowed,
        installment_count=total,
        paid_on_time=on_time,
        paid_late=late,
        currently_overdue=overdue,
        punctuality_rate=round(paid * 100 / total) if total else 0,
        delinquent=overdue > 0,
    )
