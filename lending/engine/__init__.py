"""Pure loan calculations: schedules, payments, penalties, scores and balances."""

from lending.engine.amortization import LoanTerms, Schedule, ScheduleEntry, compute_schedule
from lending.engine.ledger import (
    LedgerUpdate,
    amount_due,
    apply_partial_payment,
    outstanding_amount,
    reverse_installment,
    settle_installment,
)
from lending.engine.origination import ContractNumberSequence, create_loan, next_contract_number
from lending.engine.penalty import compute_penalty, days_overdue, display_status, is_overdue
from lending.engine.portfolio import (
    MonthlyCashFlow,
    PortfolioStats,
    aggregate_portfolio,
    classify_loan,
    filter_loans,
    monthly_cash_flow,
)
from lending.engine.scoring import (
    CreditScore,
    CustomerCreditSummary,
    compute_credit_score,
    summarize_customer,
)
from lending.engine.treasury import (
    TreasurySummary,
    compute_balance,
    record_cash_movement,
    treasury_summary,
)

__all__ = [
    "ContractNumberSequence",
    "CreditScore",
    "CustomerCreditSummary",
    "LedgerUpdate",
    "LoanTerms",
    "MonthlyCashFlow",
    "PortfolioStats",
    "Schedule",
    "ScheduleEntry",
    "TreasurySummary",
    "aggregate_portfolio",
    "amount_due",
    "apply_partial_payment",
    "classify_loan",
    "compute_balance",
    "compute_credit_score",
    "compute_penalty",
    "compute_schedule",
    "create_loan",
    "days_overdue",
    "display_status",
    "filter_loans",
    "is_overdue",
    "monthly_cash_flow",
    "next_contract_number",
    "outstanding_amount",
    "record_cash_movement",
    "reverse_installment",
    "settle_installment",
    "summarize_customer",
    "treasury_summary",
]
