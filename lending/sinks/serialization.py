"""Persisted record shapes and shared serialization utilities for sinks.

Records keep the field names and wire codes of the back office's document
store: camelCase keys, amounts as JSON numbers in currency units, calendar
days as ``YYYY-MM-DD`` strings, timestamps as epoch milliseconds and
Portuguese enum codes (``MENSAL``, ``PRICE``, ``PAGO``, ``APORTE``...).
"""

from dataclasses import fields, is_dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any

from lending.engine.money import to_decimal, to_money
from lending.exceptions import SinkError
from lending.models.lending import (
    CashMovement,
    CashMovementType,
    Customer,
    Frequency,
    Installment,
    InstallmentStatus,
    InterestMethod,
    Loan,
    PaymentRecord,
)

FREQUENCY_CODES = {
    Frequency.DAILY: "DIARIO",
    Frequency.WEEKLY: "SEMANAL",
    Frequency.MONTHLY: "MENSAL",
}
INTEREST_METHOD_CODES = {
    InterestMethod.FLAT: "SIMPLES",
    InterestMethod.AMORTIZED: "PRICE",
}
STATUS_CODES = {
    InstallmentStatus.PENDING: "PENDENTE",
    InstallmentStatus.PAID: "PAGO",
}
# Overdue is derived; older snapshots stored it as a status
LEGACY_STATUS_CODES = {"ATRASADO": InstallmentStatus.PENDING}
MOVEMENT_CODES = {
    CashMovementType.CONTRIBUTION: "APORTE",
    CashMovementType.WITHDRAWAL: "RETIRADA",
    CashMovementType.RECEIPT: "RECEBIMENTO",
    CashMovementType.REVERSAL: "ESTORNO",
}


def _decode(codes: dict, enum_type: type[Enum], value: str) -> Any:
    for member, code in codes.items():
        if value == code:
            return member
    try:
        return enum_type(value)
    except ValueError as exc:
        raise SinkError(f"Unknown {enum_type.__name__} code: {value!r}") from exc


def to_epoch_ms(value: datetime) -> int:
    return round(value.timestamp() * 1000)


def from_epoch_ms(value: int | float) -> datetime:
    millis = int(value)
    return datetime.fromtimestamp(millis // 1000) + timedelta(milliseconds=millis % 1000)


def _amount(value: Decimal | None) -> float | None:
    return None if value is None else float(value)


def _money(value: Any) -> Decimal | None:
    if value is None:
        return None
    number = to_decimal(value)
    if number is None:
        raise SinkError(f"Not an amount: {value!r}")
    return to_money(number)


def _day(value: str) -> date:
    # Older records carry full ISO timestamps
    return date.fromisoformat(value[:10])


def customer_to_record(customer: Customer) -> dict[str, Any]:
    return {
        "id": customer.customer_id,
        "name": customer.name,
        "cpf": customer.cpf,
        "rg": customer.rg,
        "email": customer.email,
        "phone": customer.phone,
        "address": customer.address,
        "notes": customer.notes,
        "createdAt": to_epoch_ms(customer.created_at),
    }


def customer_from_record(record: dict[str, Any]) -> Customer:
    return Customer(
        customer_id=record["id"],
        name=record["name"],
        cpf=record["cpf"],
        rg=record.get("rg", ""),
        email=record.get("email", ""),
        phone=record.get("phone", ""),
        address=record.get("address", ""),
        created_at=from_epoch_ms(record["createdAt"]),
        notes=record.get("notes") or "",
    )


def payment_to_record(payment: PaymentRecord) -> dict[str, Any]:
    return {
        "id": payment.record_id,
        "date": to_epoch_ms(payment.paid_at),
        "amount": _amount(payment.amount),
        "penalty": _amount(payment.penalty),
    }


def payment_from_record(record: dict[str, Any]) -> PaymentRecord:
    return PaymentRecord(
        record_id=record["id"],
        paid_at=from_epoch_ms(record["date"]),
        amount=_money(record["amount"]),
        penalty=_money(record.get("penalty") or 0),
    )


def installment_to_record(installment: Installment) -> dict[str, Any]:
    return {
        "id": installment.installment_id,
        "number": installment.number,
        "value": _amount(installment.value),
        "dueDate": installment.due_date.isoformat(),
        "status": STATUS_CODES[installment.status],
        "paidAt": to_epoch_ms(installment.paid_at) if installment.paid_at else None,
        "paidValue": _amount(installment.paid_amount),
        "penaltyApplied": _amount(installment.penalty_applied),
        "payments": [payment_to_record(p) for p in installment.payments],
    }


def installment_from_record(record: dict[str, Any], loan_id: str) -> Installment:
    paid_at = record.get("paidAt")
    status = record.get("status", "PENDENTE")
    return Installment(
        # Records written before installments had ids are keyed by number
        installment_id=record.get("id") or f"{loan_id}-{record['number']}",
        number=int(record["number"]),
        due_date=_day(record["dueDate"]),
        value=_money(record["value"]),
        status=LEGACY_STATUS_CODES.get(status) or _decode(STATUS_CODES, InstallmentStatus, status),
        paid_at=from_epoch_ms(paid_at) if paid_at else None,
        paid_amount=_money(record.get("paidValue")),
        penalty_applied=_money(record.get("penaltyApplied")),
        payments=[payment_from_record(p) for p in record.get("payments", [])],
    )


def loan_to_record(loan: Loan) -> dict[str, Any]:
    first_due = loan.first_due_date
    return {
        "id": loan.loan_id,
        "contractNumber": str(loan.contract_number),
        "customerId": loan.customer_id,
        "amount": _amount(loan.principal),
        "interestRate": _amount(loan.interest_rate),
        "installmentCount": loan.installment_count,
        "frequency": FREQUENCY_CODES[loan.frequency],
        "interestType": INTEREST_METHOD_CODES[loan.interest_method],
        "totalToReturn": _amount(loan.total_to_return),
        "installmentValue": _amount(loan.installment_value),
        "startDate": loan.start_date.isoformat(),
        "dueDate": first_due.isoformat() if first_due else None,
        "createdAt": to_epoch_ms(loan.created_at),
        "notes": loan.notes,
        "installments": [installment_to_record(i) for i in loan.installments],
    }


def loan_from_record(record: dict[str, Any]) -> Loan:
    loan_id = record["id"]
    rate = to_decimal(record["interestRate"])
    if rate is None:
        raise SinkError(f"Loan {loan_id} has no valid interest rate")
    return Loan(
        loan_id=loan_id,
        contract_number=int(record["contractNumber"]),
        customer_id=record["customerId"],
        principal=_money(record["amount"]),
        interest_rate=rate,
        installment_count=int(record["installmentCount"]),
        frequency=_decode(FREQUENCY_CODES, Frequency, record["frequency"]),
        interest_method=_decode(INTEREST_METHOD_CODES, InterestMethod, record["interestType"]),
        total_to_return=_money(record["totalToReturn"]),
        installment_value=_money(record["installmentValue"]),
        start_date=_day(record["startDate"]),
        created_at=from_epoch_ms(record["createdAt"]),
        installments=[installment_from_record(i, loan_id) for i in record.get("installments", [])],
        notes=record.get("notes") or "",
    )


def cash_movement_to_record(movement: CashMovement) -> dict[str, Any]:
    return {
        "id": movement.movement_id,
        "type": MOVEMENT_CODES[movement.movement_type],
        "amount": _amount(movement.amount),
        "description": movement.description,
        "date": to_epoch_ms(movement.created_at),
        "loanId": movement.loan_id,
    }


def cash_movement_from_record(record: dict[str, Any]) -> CashMovement:
    return CashMovement(
        movement_id=record["id"],
        movement_type=_decode(MOVEMENT_CODES, CashMovementType, record["type"]),
        amount=_money(record["amount"]),
        description=record.get("description", ""),
        created_at=from_epoch_ms(record["date"]),
        loan_id=record.get("loanId"),
    )


_RECORD_WRITERS = {
    Customer: customer_to_record,
    Loan: loan_to_record,
    Installment: installment_to_record,
    PaymentRecord: payment_to_record,
    CashMovement: cash_movement_to_record,
}


def to_record(obj: Any) -> dict:
    """Convert a model to its persisted record, or any other dataclass to a plain dict."""
    writer = _RECORD_WRITERS.get(type(obj))
    if writer is not None:
        return writer(obj)
    if is_dataclass(obj):
        return {f.name: serialize_value(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, dict):
        return {k: serialize_value(v) for k, v in obj.items()}
    return {"value": str(obj)}


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if type(value) in _RECORD_WRITERS:
        return _RECORD_WRITERS[type(value)](value)
    if isinstance(value, Decimal):
        return float(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif is_dataclass(value):
        return to_record(value)
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [serialize_value(v) for v in value]
    return value
