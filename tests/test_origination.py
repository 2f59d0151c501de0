"""Tests for loan origination and contract numbering."""

import threading
from datetime import date, datetime
from decimal import Decimal

import pytest

from lending.engine.amortization import LoanTerms
from lending.engine.origination import ContractNumberSequence, create_loan, next_contract_number
from lending.exceptions import InvalidLoanTermsError
from lending.models.lending import Customer, Frequency, InstallmentStatus, InterestMethod, Loan


class TestNextContractNumber:
    """Tests for the max+1 rule."""

    def test_base_when_empty(self) -> None:
        assert next_contract_number([]) == 2026001

    def test_max_plus_one(self) -> None:
        assert next_contract_number([2026001, 2026007, 2026003]) == 2026008

    def test_custom_base(self) -> None:
        assert next_contract_number([], base=1) == 1


class TestContractNumberSequence:
    """Tests for serialized issuance."""

    def test_two_loans_get_base_and_base_plus_one(self, customer: Customer, monthly_terms: LoanTerms) -> None:
        numbers = ContractNumberSequence()

        first = create_loan(customer, monthly_terms, numbers)
        second = create_loan(customer, monthly_terms, numbers)

        assert first.contract_number == 2026001
        assert second.contract_number == 2026002

    def test_from_loans(self, loan: Loan) -> None:
        numbers = ContractNumberSequence.from_loans([loan])

        assert numbers.last_issued == 2026001
        assert numbers.next_number() == 2026002

    def test_observe_skips_used_numbers(self) -> None:
        numbers = ContractNumberSequence()
        numbers.observe(2026050)
        numbers.observe(2026010)

        assert numbers.next_number() == 2026051

    def test_concurrent_issuance_never_collides(self) -> None:
        numbers = ContractNumberSequence()
        issued: list[int] = []
        lock = threading.Lock()

        def worker() -> None:
            for _ in range(200):
                n = numbers.next_number()
                with lock:
                    issued.append(n)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(issued) == 1600
        assert len(set(issued)) == 1600
        assert max(issued) == 2026001 + 1599


class TestCreateLoan:
    """Tests for create_loan."""

    def test_materializes_pending_schedule(self, loan: Loan, customer: Customer) -> None:
        assert loan.customer_id == customer.customer_id
        assert loan.installment_count == 12
        assert len(loan.installments) == 12
        assert [i.number for i in loan.installments] == list(range(1, 13))
        assert all(i.status == InstallmentStatus.PENDING for i in loan.installments)
        assert loan.total_to_return == Decimal("1050.00")
        assert loan.installment_value == Decimal("87.50")
        assert loan.created_at == datetime(2025, 1, 1, 10, 0)

    def test_installment_ids_unique(self, loan: Loan) -> None:
        assert len({i.installment_id for i in loan.installments}) == 12

    def test_first_due_date_one_period_after_start(self, loan: Loan) -> None:
        assert loan.installments[0].due_date == date(2025, 2, 1)

    def test_refused_terms_do_not_consume_a_number(self, customer: Customer) -> None:
        numbers = ContractNumberSequence()
        bad = LoanTerms(
            principal=Decimal("0"),
            interest_rate=Decimal("5"),
            installment_count=3,
            frequency=Frequency.WEEKLY,
            interest_method=InterestMethod.FLAT,
            start_date=date(2025, 1, 1),
        )

        with pytest.raises(InvalidLoanTermsError):
            create_loan(customer, bad, numbers)

        assert numbers.last_issued is None
        assert numbers.next_number() == 2026001

    def test_notes_and_explicit_id(self, customer: Customer, monthly_terms: LoanTerms) -> None:
        loan = create_loan(customer, monthly_terms, ContractNumberSequence(), notes="Cliente antigo", loan_id="L-1")

        assert loan.loan_id == "L-1"
        assert loan.notes == "Cliente antigo"
