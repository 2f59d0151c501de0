"""Tests for sample-data generators."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from conftest import make_customer
from lending.engine.amortization import compute_schedule
from lending.generators import CustomerGenerator, LoanTermsGenerator, PaymentBehavior
from lending.models.lending import InstallmentStatus, InterestMethod
from lending.store import LendingDataStore
from lending.validation import is_valid_cpf


class TestCustomerGenerator:
    """Tests for CustomerGenerator."""

    def test_generate_customer(self, seed: int) -> None:
        gen = CustomerGenerator(seed=seed)
        customer = gen.generate()

        assert customer.customer_id
        assert customer.name
        assert len(customer.cpf) == 11
        assert is_valid_cpf(customer.cpf)
        assert "\n" not in customer.address
        assert customer.created_at.microsecond == 0

    def test_generate_multiple_unique(self, seed: int) -> None:
        gen = CustomerGenerator(seed=seed)
        customers = list(gen.generate_batch(50))

        assert len({c.customer_id for c in customers}) == 50
        assert len({c.cpf for c in customers}) == 50

    def test_customers_accepted_by_store(self, seed: int) -> None:
        store = LendingDataStore()

        for customer in CustomerGenerator(seed=seed).generate_batch(20):
            store.add_customer(customer)

        assert len(store.customers) == 20

    def test_fixed_created_at(self, seed: int) -> None:
        when = datetime(2025, 1, 1, 9, 0)

        customer = CustomerGenerator(seed=seed).generate(created_at=when)

        assert customer.created_at == when

    def test_reproducible(self, seed: int) -> None:
        a = CustomerGenerator(seed=seed).generate(created_at=datetime(2025, 1, 1))
        b = CustomerGenerator(seed=seed).generate(created_at=datetime(2025, 1, 1))

        assert (a.name, a.cpf) == (b.name, b.cpf)


class TestLoanTermsGenerator:
    """Tests for LoanTermsGenerator."""

    def test_terms_produce_schedules(self, seed: int) -> None:
        gen = LoanTermsGenerator(seed=seed)

        for _ in range(100):
            terms = gen.generate(date(2025, 1, 15))
            schedule = compute_schedule(terms)

            low, high = gen.INSTALLMENT_RANGES[terms.frequency]
            assert low <= terms.installment_count <= high
            assert terms.principal >= Decimal("500")
            assert len(schedule.entries) == terms.installment_count
            assert schedule.total_to_return >= schedule.principal

    def test_both_methods_appear(self, seed: int) -> None:
        gen = LoanTermsGenerator(seed=seed)

        methods = {gen.generate(date(2025, 1, 15)).interest_method for _ in range(100)}

        assert methods == {InterestMethod.FLAT, InterestMethod.AMORTIZED}


@pytest.fixture
def store_with_loan(monthly_terms):
    store = LendingDataStore()
    store.add_customer(make_customer())
    loan = store.create_loan("cust-001", monthly_terms, created_at=datetime(2025, 1, 1))
    return store, loan


class TestPaymentBehavior:
    """Tests for PaymentBehavior."""

    def test_pick_valid(self, seed: int) -> None:
        behavior = PaymentBehavior(seed=seed)

        picks = {behavior.pick() for _ in range(200)}

        assert picks <= set(PaymentBehavior.BEHAVIORS)
        assert "good" in picks

    def test_pick_forced(self, seed: int) -> None:
        behavior = PaymentBehavior(seed=seed)

        assert behavior.pick(on_time_rate=0, late_rate=0, partial_rate=0, default_rate=1) == "defaulter"

    def test_good_pays_everything_due_on_time(self, seed: int, store_with_loan) -> None:
        store, loan = store_with_loan

        updates = PaymentBehavior(seed=seed).replay(store, loan, "good", date(2025, 6, 15))

        stored = store.get_loan(loan.loan_id)
        paid = [i for i in stored.installments if i.status == InstallmentStatus.PAID]
        assert len(updates) == 5
        assert len(paid) == 5
        assert all(i.penalty_applied == Decimal("0.00") for i in paid)
        assert all(i.paid_at.date() <= i.due_date for i in paid)

    def test_nothing_paid_after_reference_date(self, seed: int, store_with_loan) -> None:
        store, loan = store_with_loan

        for behavior in PaymentBehavior.BEHAVIORS:
            PaymentBehavior(seed=seed).replay(store, loan, behavior, date(2025, 4, 10))

        stored = store.get_loan(loan.loan_id)
        for inst in stored.installments:
            for payment in inst.payments:
                assert payment.paid_at.date() <= date(2025, 4, 10)

    def test_defaulter_leaves_overdue_installments(self, seed: int, store_with_loan) -> None:
        store, loan = store_with_loan

        PaymentBehavior(seed=seed).replay(store, loan, "defaulter", date(2026, 2, 1))

        stored = store.get_loan(loan.loan_id)
        assert any(i.status == InstallmentStatus.PENDING for i in stored.installments)

    def test_partial_records_two_payments(self, seed: int, store_with_loan) -> None:
        store, loan = store_with_loan

        PaymentBehavior(seed=seed).replay(store, loan, "partial", date(2026, 2, 1))

        stored = store.get_loan(loan.loan_id)
        assert all(i.status == InstallmentStatus.PAID for i in stored.installments)
        assert all(len(i.payments) == 2 for i in stored.installments)
