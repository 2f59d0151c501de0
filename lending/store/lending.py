"""Lending back-office data store with referential integrity."""

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from lending.config import LendingConfig
from lending.engine import ledger, origination, scoring
from lending.engine.amortization import LoanTerms
from lending.engine.ledger import LedgerUpdate
from lending.engine.origination import ContractNumberSequence
from lending.engine.penalty import as_datetime
from lending.engine.portfolio import PortfolioStats, aggregate_portfolio, filter_loans as select_loans
from lending.engine.treasury import (
    MANUAL_TYPES,
    TreasurySummary,
    compute_balance,
    receipt_movement,
    record_cash_movement,
    reversal_movement,
    treasury_summary,
)
from lending.exceptions import (
    ContractNumberConflictError,
    DuplicateCustomerError,
    EntityNotFoundError,
    InvalidCustomerError,
    InvalidEntityStateError,
    ReferentialIntegrityError,
)
from lending.logging import log_fields
from lending.models.base import DateRange
from lending.models.lending import CashMovement, Customer, Loan, LoanStatus
from lending.validation import is_valid_cpf, normalize_cpf

logger = logging.getLogger(__name__)

_IMMUTABLE_CUSTOMER_FIELDS = {"customer_id", "created_at"}


@dataclass
class LendingDataStore:
    """In-memory arena of customers, loans and cash movements keyed by id.

    Engine functions stay pure; the store applies what they return. A ledger
    transition replaces the whole loan record in one assignment, so readers
    never see an installment half updated.
    """

    config: LendingConfig = field(default_factory=LendingConfig)

    # Primary entities
    customers: dict[str, Customer] = field(default_factory=dict)
    loans: dict[str, Loan] = field(default_factory=dict)
    cash_movements: dict[str, CashMovement] = field(default_factory=dict)

    # Relationship and uniqueness indexes
    _customer_loans: dict[str, list[str]] = field(default_factory=dict)
    _cpf_index: dict[str, str] = field(default_factory=dict)
    _contract_index: dict[int, str] = field(default_factory=dict)

    _contract_numbers: ContractNumberSequence | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self._contract_numbers = ContractNumberSequence(base=self.config.contracts.base_number)

    @property
    def contract_numbers(self) -> ContractNumberSequence:
        return self._contract_numbers

    # Customers
    def add_customer(self, customer: Customer) -> None:
        """Add a customer to the store.

        Raises
        ------
        InvalidCustomerError
            If the CPF fails the check-digit rule.
        DuplicateCustomerError
            If the CPF is already registered.
        InvalidEntityStateError
            If the customer id is already in use.
        """
        if customer.customer_id in self.customers:
            raise InvalidEntityStateError(f"Customer {customer.customer_id} already exists")

        cpf = normalize_cpf(customer.cpf)
        if not is_valid_cpf(cpf):
            raise InvalidCustomerError(f"Invalid CPF for customer {customer.customer_id}: {customer.cpf!r}")
        if cpf in self._cpf_index:
            raise DuplicateCustomerError(f"CPF {cpf} is already registered to customer {self._cpf_index[cpf]}")

        customer = dataclasses.replace(customer, cpf=cpf)
        self.customers[customer.customer_id] = customer
        self._cpf_index[cpf] = customer.customer_id
        self._customer_loans[customer.customer_id] = []
        logger.debug("Added customer %s", customer.customer_id)

    def update_customer(self, customer_id: str, /, **changes) -> Customer:
        """Edit profile fields of a customer.

        The CPF can only change while no loan references the customer.
        """
        current = self.get_customer(customer_id)

        frozen = _IMMUTABLE_CUSTOMER_FIELDS.intersection(changes)
        if frozen:
            raise InvalidEntityStateError(f"Cannot change {', '.join(sorted(frozen))} of customer {customer_id}")
        unknown = set(changes) - {f.name for f in dataclasses.fields(Customer)}
        if unknown:
            raise InvalidCustomerError(f"Unknown customer fields: {', '.join(sorted(unknown))}")

        if "cpf" in changes:
            cpf = normalize_cpf(changes["cpf"])
            if cpf != current.cpf:
                if self._customer_loans[customer_id]:
                    raise InvalidEntityStateError(f"Customer {customer_id} has loans; CPF cannot change")
                if not is_valid_cpf(cpf):
                    raise InvalidCustomerError(f"Invalid CPF: {changes['cpf']!r}")
                if cpf in self._cpf_index:
                    raise DuplicateCustomerError(f"CPF {cpf} is already registered to customer {self._cpf_index[cpf]}")
                del self._cpf_index[current.cpf]
                self._cpf_index[cpf] = customer_id
            changes["cpf"] = cpf

        updated = dataclasses.replace(current, **changes)
        self.customers[customer_id] = updated
        logger.info("Updated customer %s", customer_id)
        return updated

    def delete_customer(self, customer_id: str) -> list[Loan]:
        """Remove a customer together with every loan they hold.

        Returns the removed loans.
        """
        customer = self.get_customer(customer_id)
        removed = [self.loans.pop(loan_id) for loan_id in self._customer_loans.pop(customer_id)]
        for loan in removed:
            del self._contract_index[loan.contract_number]
        del self._cpf_index[customer.cpf]
        del self.customers[customer_id]
        logger.info("Deleted customer %s and %d loan(s)", customer_id, len(removed))
        return removed

    def get_customer(self, customer_id: str) -> Customer:
        if customer_id not in self.customers:
            raise EntityNotFoundError(f"Customer {customer_id} not found")
        return self.customers[customer_id]

    # Loans
    def add_loan(self, loan: Loan) -> None:
        """Add a loan to the store.

        Raises
        ------
        ReferentialIntegrityError
            If the borrower is not in the store.
        ContractNumberConflictError
            If another loan already holds the contract number.
        """
        if loan.customer_id not in self.customers:
            raise ReferentialIntegrityError(f"Customer {loan.customer_id} not found")
        if loan.loan_id in self.loans:
            raise InvalidEntityStateError(f"Loan {loan.loan_id} already exists")
        if loan.contract_number in self._contract_index:
            raise ContractNumberConflictError(
                f"Contract number {loan.contract_number} is already used by loan "
                f"{self._contract_index[loan.contract_number]}"
            )

        self.loans[loan.loan_id] = loan
        self._contract_index[loan.contract_number] = loan.loan_id
        self._customer_loans[loan.customer_id].append(loan.loan_id)
        self._contract_numbers.observe(loan.contract_number)

    def create_loan(
        self,
        customer_id: str,
        terms: LoanTerms,
        created_at: datetime | None = None,
        notes: str = "",
    ) -> Loan:
        """Originate a loan for a stored customer, drawing the contract number at save time."""
        if customer_id not in self.customers:
            raise ReferentialIntegrityError(f"Customer {customer_id} not found")

        loan = origination.create_loan(
            self.customers[customer_id],
            terms,
            self._contract_numbers,
            created_at=created_at,
            notes=notes,
        )
        self.add_loan(loan)
        logger.info(
            "Created contract %d for customer %s: principal %s, %d installment(s)",
            loan.contract_number,
            customer_id,
            loan.principal,
            loan.installment_count,
            extra=log_fields(loan_id=loan.loan_id, contract=loan.contract_number, customer_id=customer_id),
        )
        return loan

    def get_loan(self, loan_id: str) -> Loan:
        if loan_id not in self.loans:
            raise EntityNotFoundError(f"Loan {loan_id} not found")
        return self.loans[loan_id]

    def get_customer_loans(self, customer_id: str) -> list[Loan]:
        """Get all loans for a customer."""
        loan_ids = self._customer_loans.get(customer_id, [])
        return [self.loans[lid] for lid in loan_ids]

    def get_loan_by_contract(self, contract_number: int) -> Loan | None:
        loan_id = self._contract_index.get(contract_number)
        return self.loans[loan_id] if loan_id else None

    # Ledger
    def _commit(self, update: LedgerUpdate, journal: CashMovement | None) -> LedgerUpdate:
        if not update.applied:
            return update
        self.loans[update.loan.loan_id] = update.loan
        if journal is not None and self.config.treasury.log_receipts:
            self.cash_movements[journal.movement_id] = journal
        return update

    def settle_installment(
        self,
        loan_id: str,
        installment_id: str,
        as_of: date | datetime | None = None,
    ) -> LedgerUpdate:
        update = ledger.settle_installment(
            self.get_loan(loan_id),
            installment_id,
            as_of=as_of,
            daily_rate=self.config.penalty.daily_rate,
        )
        return self._commit(update, receipt_movement(update))

    def reverse_installment(
        self,
        loan_id: str,
        installment_id: str,
        as_of: date | datetime | None = None,
    ) -> LedgerUpdate:
        update = ledger.reverse_installment(self.get_loan(loan_id), installment_id)
        reversed_at = as_datetime(as_of) if as_of else None
        return self._commit(update, reversal_movement(update, reversed_at))

    def apply_partial_payment(
        self,
        loan_id: str,
        installment_id: str,
        amount: Decimal,
        as_of: date | datetime | None = None,
    ) -> LedgerUpdate:
        update = ledger.apply_partial_payment(
            self.get_loan(loan_id),
            installment_id,
            amount,
            as_of=as_of,
            daily_rate=self.config.penalty.daily_rate,
        )
        return self._commit(update, receipt_movement(update))

    # Treasury
    def add_cash_movement(
        self,
        movement_type,
        amount: Decimal,
        description: str,
        created_at: datetime | None = None,
    ) -> CashMovement:
        """Record a manual contribution or withdrawal."""
        movement = record_cash_movement(movement_type, amount, description, created_at)
        self.cash_movements[movement.movement_id] = movement
        logger.info("Recorded %s of %s", movement.movement_type.value, movement.amount)
        return movement

    def update_cash_movement(self, movement_id: str, **changes) -> CashMovement:
        """Edit a manual movement; ``movement_type``, ``amount`` and ``description`` may change."""
        current = self.get_cash_movement(movement_id)
        if current.movement_type not in MANUAL_TYPES:
            raise InvalidEntityStateError(f"Journal entry {movement_id} cannot be edited")

        updated = record_cash_movement(
            changes.get("movement_type", current.movement_type),
            changes.get("amount", current.amount),
            changes.get("description", current.description),
            created_at=changes.get("created_at", current.created_at),
            movement_id=movement_id,
        )
        self.cash_movements[movement_id] = updated
        logger.info("Updated cash movement %s", movement_id)
        return updated

    def delete_cash_movement(self, movement_id: str) -> CashMovement:
        movement = self.get_cash_movement(movement_id)
        del self.cash_movements[movement_id]
        logger.info("Deleted cash movement %s", movement_id)
        return movement

    def get_cash_movement(self, movement_id: str) -> CashMovement:
        if movement_id not in self.cash_movements:
            raise EntityNotFoundError(f"Cash movement {movement_id} not found")
        return self.cash_movements[movement_id]

    # Derived views
    def credit_score(self, customer_id: str, as_of: date | datetime | None = None) -> scoring.CreditScore:
        self.get_customer(customer_id)
        return scoring.compute_credit_score(self.get_customer_loans(customer_id), as_of)

    def customer_summary(
        self,
        customer_id: str,
        as_of: date | datetime | None = None,
    ) -> scoring.CustomerCreditSummary:
        self.get_customer(customer_id)
        return scoring.summarize_customer(self.get_customer_loans(customer_id), as_of)

    def portfolio(
        self,
        date_range: DateRange | None = None,
        as_of: date | datetime | None = None,
    ) -> PortfolioStats:
        return aggregate_portfolio(
            self.loans.values(),
            date_range=date_range,
            as_of=as_of,
            daily_rate=self.config.penalty.daily_rate,
        )

    def filter_loans(
        self,
        statuses: list[LoanStatus] | None = None,
        due_range: DateRange | None = None,
        as_of: date | datetime | None = None,
    ) -> list[Loan]:
        return select_loans(self.loans.values(), statuses, due_range, as_of)

    def treasury(self) -> TreasurySummary:
        return treasury_summary(self.cash_movements.values(), self.loans.values())

    def balance(self) -> Decimal:
        """Available cash."""
        return compute_balance(self.cash_movements.values(), self.loans.values())

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "customers": len(self.customers),
            "loans": len(self.loans),
            "installments": sum(len(loan.installments) for loan in self.loans.values()),
            "cash_movements": len(self.cash_movements),
        }
