"""Borrower generator."""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Iterator

from lending.generators.base import BaseGenerator
from lending.models.lending import Customer
from lending.validation import normalize_cpf


class CustomerGenerator(BaseGenerator):
    """Generate synthetic borrowers with valid, unique CPFs."""

    NOTES = [
        "",
        "",
        "",
        "Indicado por cliente antigo",
        "Prefere contato por WhatsApp",
        "Comerciante, recebe aos sábados",
    ]

    def generate(self, created_at: datetime | None = None) -> Customer:
        """Generate a single customer.

        Parameters
        ----------
        created_at : datetime | None
            Registration time (default: up to a year before now).

        Returns
        -------
        Customer
            Generated customer.
        """
        if created_at is None:
            created_at = datetime.now() - timedelta(days=random.randint(0, 365))

        address = self.fake.address().replace("\n", ", ")
        return Customer(
            customer_id=self.fake.uuid4(),
            name=self.fake.name(),
            cpf=normalize_cpf(self.fake.unique.cpf()),
            rg=self.fake.rg(),
            email=self.fake.email(),
            phone=self.fake.cellphone_number(),
            address=address,
            created_at=created_at.replace(microsecond=0),
            notes=random.choice(self.NOTES),
        )

    def generate_batch(self, count: int, created_at: datetime | None = None) -> Iterator[Customer]:
        """Generate multiple customers.

        Parameters
        ----------
        count : int
            Number of customers to generate.
        created_at : datetime | None
            Registration time shared by the batch (default: random).

        Yields
        ------
        Customer
            Generated customers.
        """
        for _ in range(count):
            yield self.generate(created_at)
