"""Pytest configuration and fixtures."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from lending.engine.amortization import LoanTerms
from lending.engine.origination import ContractNumberSequence, create_loan
from lending.models.lending import Customer, Frequency, InterestMethod, Loan

# Check-digit valid CPFs
VALID_CPF = "52998224725"
OTHER_VALID_CPF = "11144477735"
THIRD_VALID_CPF = "12345678909"


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


def make_customer(customer_id: str = "cust-001", cpf: str = VALID_CPF) -> Customer:
    return Customer(
        customer_id=customer_id,
        name="Maria da Silva",
        cpf=cpf,
        rg="12.345.678-9",
        email="maria@example.com",
        phone="(11) 99999-0000",
        address="Rua das Flores, 100, São Paulo - SP",
        created_at=datetime(2025, 1, 1, 9, 0),
    )


@pytest.fixture
def customer_factory():
    """Build customers with a given id and CPF."""
    return make_customer


@pytest.fixture
def valid_cpfs() -> list[str]:
    return [VALID_CPF, OTHER_VALID_CPF, THIRD_VALID_CPF]


@pytest.fixture
def customer() -> Customer:
    """A borrower with a valid CPF."""
    return make_customer()


@pytest.fixture
def monthly_terms() -> LoanTerms:
    """1000 at 5% FLAT over 12 months from 2025-01-01."""
    return LoanTerms(
        principal=Decimal("1000"),
        interest_rate=Decimal("5"),
        installment_count=12,
        frequency=Frequency.MONTHLY,
        interest_method=InterestMethod.FLAT,
        start_date=date(2025, 1, 1),
    )


@pytest.fixture
def loan(customer: Customer, monthly_terms: LoanTerms) -> Loan:
    """Freshly originated loan, all installments pending."""
    return create_loan(
        customer,
        monthly_terms,
        ContractNumberSequence(),
        created_at=datetime(2025, 1, 1, 10, 0),
    )


@pytest.fixture
def small_loan(customer: Customer) -> Loan:
    """100 at 0% over 1 month, due 2025-01-01."""
    terms = LoanTerms(
        principal=Decimal("100"),
        interest_rate=Decimal("0"),
        installment_count=1,
        frequency=Frequency.MONTHLY,
        interest_method=InterestMethod.FLAT,
        start_date=date(2024, 12, 1),
    )
    return create_loan(customer, terms, ContractNumberSequence(), created_at=datetime(2024, 12, 1, 9, 0))
