"""Amortization schedules for FLAT (simples) and AMORTIZED (Price) contracts."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from lending.engine.money import ZERO, to_decimal, to_money
from lending.exceptions import InvalidLoanTermsError
from lending.models.lending.enums import Frequency, InterestMethod

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class LoanTerms:
    """Contract terms as entered by the operator.

    ``interest_rate`` is a percentage applied once over the whole term for
    FLAT contracts and once per installment period for AMORTIZED contracts.
    ``start_date`` may be a ``date`` or an ISO ``YYYY-MM-DD`` string.
    """

    principal: Decimal
    interest_rate: Decimal
    installment_count: int
    frequency: Frequency
    interest_method: InterestMethod
    start_date: date | str


@dataclass(frozen=True)
class ScheduleEntry:
    """One row of the schedule."""

    number: int
    due_date: date
    value: Decimal
    remaining_balance: Decimal


@dataclass(frozen=True)
class Schedule:
    """Computed totals and due dates for a set of terms."""

    principal: Decimal
    interest_rate: Decimal
    installment_count: int
    frequency: Frequency
    interest_method: InterestMethod
    start_date: date
    total_to_return: Decimal
    installment_value: Decimal
    total_interest: Decimal
    entries: list[ScheduleEntry] = field(default_factory=list)


def parse_start_date(value: date | str) -> date:
    """Parse a contract start date, refusing anything that is not a calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as exc:
            raise InvalidLoanTermsError(f"Unparseable start date: {value!r}") from exc
    raise InvalidLoanTermsError(f"Unparseable start date: {value!r}")


def due_date_for(start: date, frequency: Frequency, number: int) -> date:
    """Due date of installment ``number`` (1-based); the start date itself is never due.

    Monthly dates are computed from the start date rather than chained, so a
    contract starting on the 31st falls due on the last day of short months
    and returns to the 31st afterwards.
    """
    if frequency == Frequency.DAILY:
        return start + timedelta(days=number)
    if frequency == Frequency.WEEKLY:
        return start + timedelta(days=7 * number)
    if frequency == Frequency.MONTHLY:
        return start + relativedelta(months=number)
    raise InvalidLoanTermsError(f"Unknown frequency: {frequency!r}")


def _validate(terms: LoanTerms) -> tuple[Decimal, Decimal, int, Frequency, InterestMethod, date]:
    principal = to_decimal(terms.principal)
    if principal is None or principal <= 0:
        raise InvalidLoanTermsError(f"Principal must be a positive amount, got {terms.principal!r}")

    rate = to_decimal(terms.interest_rate)
    if rate is None or rate < 0:
        raise InvalidLoanTermsError(f"Interest rate must be zero or positive, got {terms.interest_rate!r}")

    count = terms.installment_count
    if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
        raise InvalidLoanTermsError(f"Installment count must be a positive integer, got {count!r}")

    try:
        frequency = Frequency(terms.frequency)
        method = InterestMethod(terms.interest_method)
    except ValueError as exc:
        raise InvalidLoanTermsError(str(exc)) from exc

    return principal, rate, count, frequency, method, parse_start_date(terms.start_date)


def _totals(principal: Decimal, rate: Decimal, count: int, method: InterestMethod) -> tuple[Decimal, Decimal]:
    """Return unrounded (total_to_return, installment_value)."""
    i = rate / HUNDRED

    if method == InterestMethod.FLAT:
        # Charged once over the term, not per period
        total = principal * (1 + i)
        return total, total / count

    if i == 0:
        return principal, principal / count

    factor = (1 + i) ** count
    installment = principal * i * factor / (factor - 1)
    return installment * count, installment


def compute_schedule(terms: LoanTerms) -> Schedule:
    """Compute totals and the installment schedule for ``terms``.

    Parameters
    ----------
    terms : LoanTerms
        Contract terms.

    Returns
    -------
    Schedule
        Totals plus ``installment_count`` entries. Every entry carries the
        rounded installment value except the last, which absorbs the cent
        residual so the entries add up to ``total_to_return``.

    Raises
    ------
    InvalidLoanTermsError
        If the principal or installment count is not positive, the rate is
        negative, or the start date cannot be parsed.
    """
    principal, rate, count, frequency, method, start = _validate(terms)

    raw_total, raw_installment = _totals(principal, rate, count, method)
    total = to_money(raw_total)
    installment_value = to_money(raw_installment)
    last_value = total - installment_value * (count - 1)

    if installment_value <= ZERO or last_value <= ZERO:
        raise InvalidLoanTermsError(
            f"Principal {principal} is too small to split into {count} installments"
        )

    entries = []
    remaining = total
    for number in range(1, count + 1):
        value = last_value if number == count else installment_value
        remaining -= value
        entries.append(
            ScheduleEntry(
                number=number,
                due_date=due_date_for(start, frequency, number),
                value=value,
                remaining_balance=remaining,
            )
        )

    return Schedule(
        principal=to_money(principal),
        interest_rate=rate,
        installment_count=count,
        frequency=frequency,
        interest_method=method,
        start_date=start,
        total_to_return=total,
        installment_value=installment_value,
        total_interest=total - to_money(principal),
        entries=entries,
    )
