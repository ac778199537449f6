"""Error taxonomy shared by services and the HTTP layer.

Every error raised to a caller is terminal for the operation that raised it.
Nothing here is retried automatically; recovery is always the operator
pressing the same button again.
"""


class POSError(Exception):
    """Base class for all user-facing POS errors."""

    kind = "unknown"
    title = "Unknown Error"
    recovery_suggestion = "Please restart the app or contact support."

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def description(self) -> str:
        """Human readable description shown in the alert."""
        return f"{self.title}: {self.message}"


class NetworkError(POSError):
    """Transport or backend store failure."""

    kind = "network"
    title = "Network Error"
    recovery_suggestion = "Please check your internet connection and try again."


class DataError(POSError):
    """Malformed or missing catalog/order data."""

    kind = "data"
    title = "Data Error"
    recovery_suggestion = "Please refresh the app or contact support."


class ValidationError(POSError, ValueError):
    """Invalid input, e.g. a bad price in an admin form.

    Also a ``ValueError`` so pydantic validators report it as a field error.
    """

    kind = "validation"
    title = "Validation Error"
    recovery_suggestion = "Please check your input and try again."


class PaymentError(POSError):
    """Payment could not be completed."""

    kind = "payment"
    title = "Payment Error"
    recovery_suggestion = "Please try a different payment method or contact support."


class NotFoundError(POSError):
    kind = "not_found"
    title = "Not Found"
    recovery_suggestion = "Please refresh and try again."


class CheckoutInProgressError(POSError):
    kind = "conflict"
    title = "Checkout In Progress"
    recovery_suggestion = "Please wait for the current checkout to finish."


class InvalidStatusTransition(ValidationError):
    """Order status change that the lifecycle does not allow."""
