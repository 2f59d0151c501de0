"""Loan models for lending domain."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from lending.models.lending.enums import Frequency, InstallmentStatus, InterestMethod


@dataclass
class PaymentRecord:
    """A single amount received against an installment."""

    record_id: str
    paid_at: datetime
    amount: Decimal
    penalty: Decimal = Decimal("0.00")  # penalty as of this payment


@dataclass
class Installment:
    """Loan installment (parcela)."""

    installment_id: str
    number: int  # 1, 2, 3, ...
    due_date: date
    value: Decimal  # fixed at schedule generation
    status: InstallmentStatus = InstallmentStatus.PENDING
    paid_at: datetime | None = None
    paid_amount: Decimal | None = None  # cumulative, includes partial payments
    penalty_applied: Decimal | None = None  # frozen at settlement
    payments: list[PaymentRecord] = field(default_factory=list)

    @property
    def is_paid(self) -> bool:
        return self.status == InstallmentStatus.PAID


@dataclass
class Loan:
    """Loan contract with its full installment schedule."""

    loan_id: str
    contract_number: int
    customer_id: str
    principal: Decimal
    interest_rate: Decimal  # percentage, e.g. Decimal("5") for 5%
    installment_count: int
    frequency: Frequency
    interest_method: InterestMethod
    total_to_return: Decimal
    installment_value: Decimal
    start_date: date
    created_at: datetime
    installments: list[Installment] = field(default_factory=list)
    notes: str = ""

    @property
    def total_interest(self) -> Decimal:
        return self.total_to_return - self.principal

    @property
    def first_due_date(self) -> date | None:
        return self.installments[0].due_date if self.installments else None

    def find_installment(self, installment_id: str) -> Installment | None:
        """Return the installment with ``installment_id`` or ``None``."""
        for installment in self.installments:
            if installment.installment_id == installment_id:
                return installment
        return None
