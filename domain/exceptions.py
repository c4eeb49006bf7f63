class InstallmentError(Exception):
    """Base class for errors raised by the installment domain."""

    code = "installment_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(InstallmentError):
    """Malformed or out-of-range input. Not retryable."""

    code = "validation_error"


class NotFoundError(InstallmentError):
    """Referenced plan or sale does not exist."""

    code = "not_found"


class InvalidStateError(InstallmentError):
    """Operation not permitted in the plan's current state."""

    code = "invalid_state"


class StorageError(InstallmentError):
    """
    Underlying persistence failure.

    The failed operation left no partial change behind, so callers may retry it.
    """

    code = "storage_error"
