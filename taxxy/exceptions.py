"""Custom exceptions for Taxxy."""


class TaxxyError(Exception):
    """Base exception for Taxxy errors."""
    pass


class CompletionError(TaxxyError):
    """The completion API call failed or returned nothing usable."""
    pass


class TransactionNotFoundError(TaxxyError):
    """Raised when a transaction is not found for the owner."""
    pass


class InvalidTransactionError(TaxxyError):
    """Raised when transaction input is missing required fields or malformed."""
    pass
