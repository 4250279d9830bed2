"""formpulse exception hierarchy.

Delivery and signature failures are reported as values, not exceptions.
The exceptions below are raised for caller mistakes (unknown
subscriptions or forms, invalid input) and persistence failures.
All exceptions inherit from FormPulseError for easy catching.
"""

from __future__ import annotations


class FormPulseError(Exception):
    """Base exception for all formpulse errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code for API responses.
    """

    code: str = "formpulse_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, object]:
        """Convert exception to API-friendly dictionary."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
            }
        }


class ValidationError(FormPulseError):
    """Invalid input provided.

    Attributes:
        field: The field that failed validation.
        message: Description of the validation failure.
    """

    code: str = "validation_error"

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")

    def to_dict(self) -> dict[str, object]:
        """Convert exception to API-friendly dictionary."""
        return {
            "error": {
                "code": self.code,
                "field": self.field,
                "message": self.message,
            }
        }


class NotFoundError(FormPulseError):
    """Resource not found.

    Raised when a requested resource (form, webhook, etc.) doesn't exist.

    Attributes:
        resource_type: Type of resource (e.g., "form", "webhook").
        resource_id: ID of the missing resource.
    """

    code: str = "not_found"

    def __init__(self, resource_type: str, resource_id: str) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} not found: {resource_id}")

    def to_dict(self) -> dict[str, object]:
        """Convert exception to API-friendly dictionary."""
        return {
            "error": {
                "code": self.code,
                "resource_type": self.resource_type,
                "resource_id": self.resource_id,
                "message": self.message,
            }
        }


class StorageError(FormPulseError):
    """Storage operation failed.

    Raised by persistence collaborators when a read or write fails.
    Transient instances are retried when writing delivery logs.
    """

    code: str = "storage_error"


class DeliveryError(FormPulseError):
    """A webhook could not be dispatched.

    Not raised by ``deliver`` itself; used to wrap unexpected failures
    inside background fan-out tasks so they can be logged uniformly.

    Attributes:
        webhook_id: Subscription the delivery was for.
    """

    code: str = "delivery_error"

    def __init__(self, webhook_id: str, message: str) -> None:
        self.webhook_id = webhook_id
        super().__init__(f"Webhook {webhook_id}: {message}")


class ConfigurationError(FormPulseError):
    """Configuration error.

    Raised when required configuration is missing or invalid.
    """

    code: str = "configuration_error"
