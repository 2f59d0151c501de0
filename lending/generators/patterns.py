"""Borrower payment behaviour replayed through the ledger."""

from __future__ import annotations

import random
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from lending.engine.ledger import LedgerUpdate, outstanding_amount
from lending.engine.money import to_money
from lending.models.lending import Loan
from lending.store.lending import LendingDataStore


class PaymentBehavior:
    """Simulate how a borrower pays a contract.

    Behaviour types:
    - ``good``: pays on or before the due date
    - ``occasional_late``: mostly on time, sometimes days late with penalty
    - ``partial``: splits each installment into two payments
    - ``defaulter``: stops paying after a few installments
    """

    BEHAVIORS = ["good", "occasional_late", "partial", "defaulter"]

    def __init__(self, seed: int | None = None) -> None:
        if seed is not None:
            random.seed(seed)

    def pick(
        self,
        on_time_rate: float = 0.70,
        late_rate: float = 0.15,
        partial_rate: float = 0.08,
        default_rate: float = 0.07,
    ) -> str:
        return random.choices(
            self.BEHAVIORS,
            weights=[on_time_rate, late_rate, partial_rate, default_rate],
            k=1,
        )[0]

    @staticmethod
    def _moment(day: date) -> datetime:
        return datetime.combine(day, time(hour=random.randint(8, 18), minute=random.randint(0, 59)))

    def replay(
        self,
        store: LendingDataStore,
        loan: Loan,
        behavior: str,
        reference_date: date,
    ) -> list[LedgerUpdate]:
        """Apply ``behavior`` to every installment of ``loan`` due by ``reference_date``.

        Payments are recorded through the store, so penalties are computed
        by the ledger at each payment moment. Nothing is paid after
        ``reference_date``.

        Returns
        -------
        list[LedgerUpdate]
            Applied transitions, oldest first.
        """
        updates: list[LedgerUpdate] = []
        stop_after = random.randint(1, max(1, loan.installment_count - 1))

        for installment in loan.installments:
            if installment.due_date > reference_date:
                break

            if behavior == "good":
                paid_on = max(installment.due_date - timedelta(days=random.randint(0, 2)), loan.start_date)
                updates.append(self._settle(store, loan, installment.installment_id, paid_on, reference_date))

            elif behavior == "occasional_late":
                delay = random.randint(0, 1) if random.random() < 0.75 else random.randint(2, 10)
                paid_on = installment.due_date + timedelta(days=delay)
                updates.append(self._settle(store, loan, installment.installment_id, paid_on, reference_date))

            elif behavior == "partial":
                first_on = installment.due_date + timedelta(days=random.randint(0, 3))
                if first_on > reference_date:
                    continue
                half = to_money(installment.value / 2)
                updates.append(
                    store.apply_partial_payment(
                        loan.loan_id, installment.installment_id, half, as_of=self._moment(first_on)
                    )
                )
                second_on = first_on + timedelta(days=random.randint(1, 7))
                if second_on <= reference_date:
                    moment = self._moment(second_on)
                    current = store.get_loan(loan.loan_id).find_installment(installment.installment_id)
                    remaining = outstanding_amount(current, moment, store.config.penalty.daily_rate)
                    if remaining > Decimal("0"):
                        updates.append(
                            store.apply_partial_payment(
                                loan.loan_id, installment.installment_id, remaining, as_of=moment
                            )
                        )

            elif behavior == "defaulter":
                if installment.number > stop_after:
                    break
                updates.append(
                    self._settle(store, loan, installment.installment_id, installment.due_date, reference_date)
                )

        return [u for u in updates if u is not None and u.applied]

    def _settle(
        self,
        store: LendingDataStore,
        loan: Loan,
        installment_id: str,
        paid_on: date,
        reference_date: date,
    ) -> LedgerUpdate | None:
        if paid_on > reference_date:
            return None
        return store.settle_installment(loan.loan_id, installment_id, as_of=self._moment(paid_on))
