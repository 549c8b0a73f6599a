class LedgerValidationError(Exception):
    """Base class for banking transactions rejected before anything is written."""

    code = "invalid_transaction"


class InvalidKindError(LedgerValidationError):
    """Raised when the transaction type is not one of the known kinds."""

    code = "invalid_kind"


class NonPositiveAmountError(LedgerValidationError):
    """Raised when the amount is zero or negative."""

    code = "non_positive_amount"


class MissingCounterpartyError(LedgerValidationError):
    """Raised when a borrowing does not name the employee borrowing the cash."""

    code = "missing_counterparty"


class InvalidPaymentMethodError(LedgerValidationError):
    """Raised when a payment method is missing, unknown or given to a non-withdrawal."""

    code = "invalid_payment_method"


class NegativeChargeError(LedgerValidationError):
    """Raised when an explicit charge is below the floor for its kind."""

    code = "negative_charge"


class BelowMinimumTransferAmountError(LedgerValidationError):
    """Raised when a ledger transfer is too small to cover the transfer fee."""

    code = "below_minimum_transfer_amount"


class InsufficientFundsError(LedgerValidationError):
    """Raised when a transaction would drop the cash, ledger or wallet balance below zero."""

    code = "insufficient_funds"


class ConcurrentLedgerUpdateError(Exception):
    """Raised when another write landed between reading the balances and appending."""


class DuplicateIdempotencyKeyError(Exception):
    """Raised when the same idempotency key is reused with different input."""


class UserNotFoundError(Exception):
    """Raised when a user id is missing from the store."""


class DuplicateUserError(Exception):
    """Raised when an email address is already registered."""


class AuthenticationError(Exception):
    """Raised when the caller cannot be identified."""


class PermissionDeniedError(Exception):
    """Raised when the caller may not perform the requested operation."""


class UserInUseError(Exception):
    """Raised when deleting a user that banking transactions still reference."""
