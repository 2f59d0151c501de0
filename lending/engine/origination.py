"""Loan origination and contract numbering."""

import logging
import threading
import uuid
from datetime import datetime
from typing import Iterable, Protocol

from lending.config import DEFAULT_CONTRACT_BASE_NUMBER
from lending.engine.amortization import LoanTerms, compute_schedule
from lending.models.lending import Customer, Installment, InstallmentStatus, Loan

logger = logging.getLogger(__name__)


class ContractNumberSource(Protocol):
    """Anything that can hand out the next contract number."""

    def next_number(self) -> int: ...


def next_contract_number(
    existing: Iterable[int],
    base: int = DEFAULT_CONTRACT_BASE_NUMBER,
) -> int:
    """Return ``max(existing) + 1``, or ``base`` when there are no contracts yet."""
    numbers = list(existing)
    if not numbers:
        return base
    return max(numbers) + 1


class ContractNumberSequence:
    """Serialized contract-number issuance.

    A max-scan over a possibly stale snapshot lets two sessions pick the
    same number; this sequence hands numbers out under a lock and remembers
    the highest one issued or observed.

    Parameters
    ----------
    base : int
        Number issued when no contract exists yet.
    last_issued : int | None
        Highest number already in use, if any.
    """

    def __init__(
        self,
        base: int = DEFAULT_CONTRACT_BASE_NUMBER,
        last_issued: int | None = None,
    ) -> None:
        self.base = base
        self._last = last_issued
        self._lock = threading.Lock()

    @classmethod
    def from_loans(
        cls,
        loans: Iterable[Loan],
        base: int = DEFAULT_CONTRACT_BASE_NUMBER,
    ) -> "ContractNumberSequence":
        """Seed a sequence from the contracts already stored."""
        numbers = [loan.contract_number for loan in loans]
        return cls(base=base, last_issued=max(numbers) if numbers else None)

    @property
    def last_issued(self) -> int | None:
        return self._last

    def next_number(self) -> int:
        """Issue the next contract number."""
        with self._lock:
            self._last = next_contract_number([] if self._last is None else [self._last], self.base)
            return self._last

    def observe(self, number: int) -> None:
        """Record a number issued elsewhere so it is never handed out again."""
        with self._lock:
            if self._last is None or number > self._last:
                self._last = number


def create_loan(
    customer: Customer,
    terms: LoanTerms,
    contract_numbers: ContractNumberSource,
    created_at: datetime | None = None,
    notes: str = "",
    loan_id: str | None = None,
) -> Loan:
    """Build a loan with its fully materialized, all-PENDING schedule.

    The schedule is computed before a contract number is drawn, so refused
    terms never consume a number.

    Parameters
    ----------
    customer : Customer
        Borrower.
    terms : LoanTerms
        Contract terms.
    contract_numbers : ContractNumberSource
        Issues the contract number at save time.
    created_at : datetime | None
        Origination timestamp (default: now).
    notes : str
        Free-text notes.
    loan_id : str | None
        Explicit id (default: a new UUID).

    Returns
    -------
    Loan
        The new loan.

    Raises
    ------
    InvalidLoanTermsError
        If the terms cannot produce a schedule.
    """
    schedule = compute_schedule(terms)
    contract_number = contract_numbers.next_number()

    installments = [
        Installment(
            installment_id=str(uuid.uuid4()),
            number=entry.number,
            due_date=entry.due_date,
            value=entry.value,
            status=InstallmentStatus.PENDING,
        )
        for entry in schedule.entries
    ]

    loan = Loan(
        loan_id=loan_id or str(uuid.uuid4()),
        contract_number=contract_number,
        customer_id=customer.customer_id,
        principal=schedule.principal,
        interest_rate=schedule.interest_rate,
        installment_count=schedule.installment_count,
        frequency=schedule.frequency,
        interest_method=schedule.interest_method,
        total_to_return=schedule.total_to_return,
        installment_value=schedule.installment_value,
        start_date=schedule.start_date,
        created_at=created_at or datetime.now(),
        installments=installments,
        notes=notes,
    )

    logger.debug(
        "Originated contract %d for customer %s: %s x %s (%s, %s)",
        contract_number,
        customer.customer_id,
        schedule.installment_count,
        schedule.installment_value,
        schedule.interest_method.value,
        schedule.frequency.value,
    )
    return loan
