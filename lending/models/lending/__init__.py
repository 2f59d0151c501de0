"""Lending domain models."""

from lending.models.lending.cash import CashMovement
from lending.models.lending.customer import Customer
from lending.models.lending.enums import (
    CashMovementType,
    DisplayStatus,
    Frequency,
    InstallmentStatus,
    InterestMethod,
    LoanStatus,
    ScoreBand,
)
from lending.models.lending.loan import Installment, Loan, PaymentRecord

__all__ = [
    "CashMovement",
    "CashMovementType",
    "Customer",
    "DisplayStatus",
    "Frequency",
    "Installment",
    "InstallmentStatus",
    "InterestMethod",
    "Loan",
    "LoanStatus",
    "PaymentRecord",
    "ScoreBand",
]
