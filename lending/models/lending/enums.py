"""Enumeration types for lending domain entities."""

from enum import Enum


class Frequency(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class InterestMethod(str, Enum):
    FLAT = "FLAT"  # SIMPLES: rate charged once over the whole term
    AMORTIZED = "AMORTIZED"  # PRICE: annuity, equal installments


class InstallmentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"


class DisplayStatus(str, Enum):
    """Read-time status of an installment; OVERDUE is never stored."""

    PENDING = "PENDING"
    OVERDUE = "OVERDUE"
    PAID = "PAID"


class LoanStatus(str, Enum):
    ACTIVE = "ACTIVE"
    OVERDUE = "OVERDUE"
    SETTLED = "SETTLED"


class CashMovementType(str, Enum):
    CONTRIBUTION = "CONTRIBUTION"
    WITHDRAWAL = "WITHDRAWAL"
    RECEIPT = "RECEIPT"  # journal only
    REVERSAL = "REVERSAL"  # journal only


class ScoreBand(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    CRITICAL = "Critical"
