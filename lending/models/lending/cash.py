"""Treasury cash movement model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from lending.models.lending.enums import CashMovementType


@dataclass
class CashMovement:
    """Manual contribution/withdrawal, or a journal entry for a receipt."""

    movement_id: str
    movement_type: CashMovementType
    amount: Decimal
    description: str
    created_at: datetime
    loan_id: str | None = None
