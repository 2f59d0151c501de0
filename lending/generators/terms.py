"""Contract terms generator."""

from __future__ import annotations

import random
from datetime import date
from decimal import Decimal

from lending.engine.amortization import LoanTerms
from lending.generators.base import BaseGenerator
from lending.models.lending import Frequency, InterestMethod


class LoanTermsGenerator(BaseGenerator):
    """Generate plausible small-lender contract terms."""

    FREQUENCIES = [Frequency.DAILY, Frequency.WEEKLY, Frequency.MONTHLY]
    FREQUENCY_WEIGHTS = [0.25, 0.35, 0.40]

    # Installment count ranges per frequency
    INSTALLMENT_RANGES = {
        Frequency.DAILY: (10, 30),
        Frequency.WEEKLY: (4, 12),
        Frequency.MONTHLY: (2, 12),
    }

    # Rate ranges (percent): FLAT is charged once, AMORTIZED per period
    RATE_RANGES = {
        InterestMethod.FLAT: (10, 40),
        InterestMethod.AMORTIZED: (2, 8),
    }

    def generate(self, start_date: date) -> LoanTerms:
        """Generate terms for a contract starting on ``start_date``."""
        frequency = random.choices(self.FREQUENCIES, weights=self.FREQUENCY_WEIGHTS, k=1)[0]
        method = InterestMethod.FLAT if random.random() < 0.6 else InterestMethod.AMORTIZED

        low, high = self.INSTALLMENT_RANGES[frequency]
        rate_low, rate_high = self.RATE_RANGES[method]

        return LoanTerms(
            principal=Decimal(random.randint(5, 100) * 100),
            interest_rate=Decimal(random.randint(rate_low, rate_high)),
            installment_count=random.randint(low, high),
            frequency=frequency,
            interest_method=method,
            start_date=start_date,
        )
