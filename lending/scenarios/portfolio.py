"""Sample portfolio scenario: borrowers, contracts and payment history."""

from __future__ import annotations

import logging
import random
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from lending.config import LendingConfig
from lending.engine.ledger import LedgerUpdate
from lending.generators import CustomerGenerator, LoanTermsGenerator, PaymentBehavior
from lending.models.lending import CashMovementType
from lending.sinks.kafka import KafkaSink
from lending.store.lending import LendingDataStore

logger = logging.getLogger(__name__)


class SamplePortfolioScenario:
    """Generate a small lender's book as of a reference date.

    This scenario creates:
    - An opening capital contribution
    - Borrowers with valid CPFs
    - Contracts originated through the store over the preceding months
    - Payment history replayed through the ledger (on-time, late, partial,
      defaulting borrowers)
    - Occasional owner withdrawals
    """

    def __init__(
        self,
        num_customers: int = 50,
        max_loans_per_customer: int = 3,
        history_days: int = 180,
        opening_capital: Decimal = Decimal("100000.00"),
        reference_date: date | None = None,
        seed: int | None = None,
        *,
        config: LendingConfig | None = None,
    ) -> None:
        """Initialize the scenario.

        Parameters
        ----------
        num_customers : int
            Number of borrowers to generate.
        max_loans_per_customer : int
            Upper bound of contracts per borrower (at least one each).
        history_days : int
            How far back contracts may start.
        opening_capital : Decimal
            First contribution recorded in the treasury.
        reference_date : date | None
            "Today" of the generated book (default: today).
        seed : int | None
            Random seed for reproducibility.
        config : LendingConfig | None
            Store configuration (penalty rate, contract base, receipt journal).
        """
        self.num_customers = num_customers
        self.max_loans_per_customer = max(1, max_loans_per_customer)
        self.history_days = history_days
        self.opening_capital = opening_capital
        self.reference_date = reference_date or date.today()
        self.seed = seed
        self.config = config or LendingConfig()

        if seed is not None:
            random.seed(seed)

        self.store = LendingDataStore(config=self.config)
        self._customer_gen = CustomerGenerator(seed=seed)
        self._terms_gen = LoanTermsGenerator(seed=seed)
        self._payment_behavior = PaymentBehavior(seed=seed)
        self.ledger_updates: list[LedgerUpdate] = []

    def _opened_at(self, day: date) -> datetime:
        return datetime.combine(day, time(hour=9))

    def generate(self) -> LendingDataStore:
        """Generate all data for the scenario.

        Returns
        -------
        LendingDataStore
            Store containing the generated book.
        """
        logger.info(
            "Starting sample portfolio: %d customers, %d days of history",
            self.num_customers,
            self.history_days,
        )
        first_day = self.reference_date - timedelta(days=self.history_days)

        self.store.add_cash_movement(
            CashMovementType.CONTRIBUTION,
            self.opening_capital,
            "Capital inicial",
            created_at=self._opened_at(first_day),
        )

        for customer in self._customer_gen.generate_batch(self.num_customers, self._opened_at(first_day)):
            self.store.add_customer(customer)

        logger.info("Generated %d customers", len(self.store.customers))

        payments = 0
        for customer_id in list(self.store.customers):
            behavior = self._payment_behavior.pick()
            for _ in range(random.randint(1, self.max_loans_per_customer)):
                start = first_day + timedelta(days=random.randint(0, self.history_days))
                loan = self.store.create_loan(
                    customer_id,
                    self._terms_gen.generate(start),
                    created_at=self._opened_at(start),
                )
                updates = self._payment_behavior.replay(self.store, loan, behavior, self.reference_date)
                self.ledger_updates.extend(updates)
                payments += len(updates)

        # One owner withdrawal per month of history
        for months_back in range(self.history_days // 30):
            day = self.reference_date - timedelta(days=30 * months_back + random.randint(0, 29))
            self.store.add_cash_movement(
                CashMovementType.WITHDRAWAL,
                Decimal(random.randint(5, 30) * 100),
                "Retirada do sócio",
                created_at=self._opened_at(max(day, first_day)),
            )

        logger.info(
            "Generated %d loans with %d installments and %d payments",
            len(self.store.loans),
            self.store.summary()["installments"],
            payments,
        )
        return self.store

    def export(self, sinks: list[Any]) -> None:
        """Export generated data to sinks.

        Parameters
        ----------
        sinks : list[Any]
            List of sink instances (JsonFileSink, ConsoleSink, KafkaSink).
            Kafka sinks also receive the lifecycle events of the book.
        """
        for sink in sinks:
            sink.write_batch("customers", list(self.store.customers.values()))
            sink.write_batch("loans", list(self.store.loans.values()))
            sink.write_batch("cash_movements", list(self.store.cash_movements.values()))
            if isinstance(sink, KafkaSink):
                sink.publish_history(
                    list(self.store.loans.values()),
                    self.ledger_updates,
                    list(self.store.cash_movements.values()),
                )

        logger.info("Exported sample portfolio to %d sinks", len(sinks))

    def get_portfolio_summary(self) -> dict[str, Any]:
        """Get summary figures for the generated book.

        Returns
        -------
        dict[str, Any]
            Portfolio and treasury figures as of the reference date.
        """
        if not self.store.loans:
            return {}

        as_of = datetime.combine(self.reference_date, time.max)
        stats = self.store.portfolio(as_of=as_of)
        treasury = self.store.treasury()

        bands: dict[str, int] = {}
        for customer_id in self.store.customers:
            band = self.store.credit_score(customer_id, as_of).band.value
            bands[band] = bands.get(band, 0) + 1

        return {
            "total_loans": stats.loan_count,
            "active_loans": stats.active_count,
            "overdue_loans": stats.overdue_count,
            "settled_loans": stats.settled_count,
            "principal_lent": float(stats.principal_lent),
            "principal_outstanding": float(stats.principal_outstanding),
            "amount_receivable": float(stats.amount_receivable),
            "accrued_penalties": float(stats.accrued_penalties),
            "total_received": float(stats.total_received),
            "balance": float(treasury.balance),
            "score_bands": bands,
        }
