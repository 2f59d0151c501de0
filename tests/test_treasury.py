"""Tests for treasury cash movements and balance."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from lending.engine.ledger import apply_partial_payment, reverse_installment, settle_installment
from lending.engine.treasury import (
    compute_balance,
    receipt_movement,
    record_cash_movement,
    reversal_movement,
    treasury_summary,
)
from lending.exceptions import InvalidCashMovementError, InvalidInputError
from lending.models.lending import CashMovementType, Loan


class TestRecordCashMovement:
    """Tests for manual movements."""

    def test_contribution(self) -> None:
        movement = record_cash_movement(
            CashMovementType.CONTRIBUTION, Decimal("5000"), "Capital inicial", datetime(2025, 1, 1)
        )

        assert movement.movement_type == CashMovementType.CONTRIBUTION
        assert movement.amount == Decimal("5000.00")
        assert movement.description == "Capital inicial"
        assert movement.created_at == datetime(2025, 1, 1)
        assert movement.movement_id

    def test_accepts_type_value(self) -> None:
        movement = record_cash_movement("WITHDRAWAL", Decimal("10"), "Retirada")

        assert movement.movement_type == CashMovementType.WITHDRAWAL

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1"), None, "x"])
    def test_rejects_non_positive_amount(self, amount) -> None:
        with pytest.raises(InvalidCashMovementError):
            record_cash_movement(CashMovementType.CONTRIBUTION, amount, "Aporte")

    @pytest.mark.parametrize("description", ["", "   "])
    def test_rejects_blank_description(self, description: str) -> None:
        with pytest.raises(InvalidCashMovementError):
            record_cash_movement(CashMovementType.CONTRIBUTION, Decimal("1"), description)

    @pytest.mark.parametrize("kind", [CashMovementType.RECEIPT, CashMovementType.REVERSAL, "LOAN"])
    def test_rejects_non_manual_types(self, kind) -> None:
        with pytest.raises(InvalidInputError):
            record_cash_movement(kind, Decimal("1"), "x")


class TestBalance:
    """Tests for the balance formula."""

    def test_no_activity(self) -> None:
        assert compute_balance([], []) == Decimal("0.00")

    def test_contributions_minus_withdrawals(self) -> None:
        movements = [
            record_cash_movement(CashMovementType.CONTRIBUTION, Decimal("5000"), "Aporte"),
            record_cash_movement(CashMovementType.WITHDRAWAL, Decimal("1200"), "Retirada"),
        ]

        assert compute_balance(movements, []) == Decimal("3800.00")

    def test_loans_and_receipts(self, loan: Loan) -> None:
        movements = [record_cash_movement(CashMovementType.CONTRIBUTION, Decimal("5000"), "Aporte")]
        inst = loan.installments
        loan = settle_installment(loan, inst[0].installment_id, date(2025, 2, 11)).loan
        loan = apply_partial_payment(loan, inst[1].installment_id, Decimal("10"), date(2025, 2, 15)).loan

        summary = treasury_summary(movements, [loan])

        # 87.50 + 10 days of 1.5% = 100.63, plus a partial 10.00
        assert summary.total_received == Decimal("110.63")
        assert summary.principal_lent == Decimal("1000.00")
        assert summary.balance == Decimal("5000.00") + Decimal("110.63") - Decimal("1000.00")
        assert compute_balance(movements, [loan]) == summary.balance

    def test_journal_entries_do_not_double_count(self, small_loan: Loan) -> None:
        update = settle_installment(small_loan, small_loan.installments[0].installment_id, date(2025, 1, 1))
        receipt = receipt_movement(update)
        manual = [record_cash_movement(CashMovementType.CONTRIBUTION, Decimal("100"), "Aporte")]

        assert compute_balance(manual + [receipt], [update.loan]) == compute_balance(manual, [update.loan])

    def test_reversal_lowers_balance(self, small_loan: Loan) -> None:
        inst_id = small_loan.installments[0].installment_id
        paid = settle_installment(small_loan, inst_id, date(2025, 1, 1)).loan
        reopened = reverse_installment(paid, inst_id).loan

        assert compute_balance([], [paid]) - compute_balance([], [reopened]) == Decimal("100.00")


class TestJournalMovements:
    """Tests for RECEIPT / REVERSAL journal entries."""

    def test_receipt_for_settlement(self, small_loan: Loan) -> None:
        update = settle_installment(small_loan, small_loan.installments[0].installment_id, date(2025, 1, 3))
        receipt = receipt_movement(update)

        assert receipt.movement_type == CashMovementType.RECEIPT
        assert receipt.amount == Decimal("103.00")
        assert receipt.loan_id == small_loan.loan_id
        assert receipt.created_at == datetime(2025, 1, 3)
        assert "2026001" in receipt.description

    def test_receipt_for_partial(self, small_loan: Loan) -> None:
        update = apply_partial_payment(
            small_loan, small_loan.installments[0].installment_id, Decimal("25"), date(2024, 12, 5)
        )

        assert receipt_movement(update).amount == Decimal("25.00")

    def test_no_receipt_when_ignored(self, small_loan: Loan) -> None:
        update = reverse_installment(small_loan, small_loan.installments[0].installment_id)

        assert receipt_movement(update) is None
        assert reversal_movement(update) is None

    def test_reversal_refunds_previous_paid_amount(self, small_loan: Loan) -> None:
        inst_id = small_loan.installments[0].installment_id
        paid = settle_installment(small_loan, inst_id, date(2025, 1, 2)).loan

        movement = reversal_movement(reverse_installment(paid, inst_id), datetime(2025, 1, 5))

        assert movement.movement_type == CashMovementType.REVERSAL
        assert movement.amount == Decimal("101.50")
        assert movement.created_at == datetime(2025, 1, 5)
