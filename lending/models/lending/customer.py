"""Customer model for lending domain."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Customer:
    """Borrower registered in the back office."""

    customer_id: str
    name: str
    cpf: str  # 11 digits, check-digit validated
    rg: str
    email: str
    phone: str
    address: str
    created_at: datetime
    notes: str = ""
