"""Custom exception hierarchy for lending-core."""


class LendingError(Exception):
    """Base exception for all lending-core errors."""


class InvalidInputError(LendingError):
    """Raised when an operation is refused because of invalid input."""


class InvalidLoanTermsError(InvalidInputError):
    """Raised when contract terms cannot produce a schedule."""


class InvalidPaymentError(InvalidInputError):
    """Raised when a payment amount is not strictly positive."""


class InvalidCustomerError(InvalidInputError):
    """Raised when customer data fails validation (e.g. a bad CPF)."""


class InvalidCashMovementError(InvalidInputError):
    """Raised when a cash movement has a bad type or amount."""


class EntityNotFoundError(LendingError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class InstallmentNotFoundError(EntityNotFoundError):
    """Raised when an installment id does not belong to the loan."""


class InvalidEntityStateError(LendingError):
    """Raised when an entity is in an invalid state for the operation."""


class ContractNumberConflictError(InvalidEntityStateError):
    """Raised when a contract number is already taken by another loan."""


class DuplicateCustomerError(InvalidEntityStateError):
    """Raised when a CPF is already registered to another customer."""


class ConfigurationError(LendingError):
    """Raised when configuration is invalid or missing."""


class SinkError(LendingError):
    """Raised when a sink operation fails."""
