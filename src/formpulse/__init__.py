"""formpulse: webhooks and response analytics for form builders.

Signs and delivers form events to subscriber URLs with bounded retries,
and turns stored responses into per-field statistics.

Quick Start:
    from formpulse.storage import InMemoryStore
    from formpulse.webhooks import WebhookDeliveryService
    from formpulse.analytics import AnalyticsService

    store = InMemoryStore()
    webhooks = WebhookDeliveryService(store)
    await webhooks.notify_response_submitted(form, response, fields)

    report = await AnalyticsService(store).form_analytics(form.id)
"""

__version__ = "0.1.0"

# Configuration
from .config import Settings, settings

# Exceptions
from .exceptions import (
    ConfigurationError,
    DeliveryError,
    FormPulseError,
    NotFoundError,
    StorageError,
    ValidationError,
)

# Logging
from .logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    logger,
    unbind_context,
)

# Models
from .models import (
    DeliveryAttempt,
    DeliveryResult,
    FieldAnalytics,
    FieldDescriptor,
    Form,
    FormAnalytics,
    FormResponse,
    WebhookPayload,
    WebhookSubscription,
)

__all__ = [
    # Version
    "__version__",
    # Configuration
    "Settings",
    "settings",
    # Exceptions
    "FormPulseError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "DeliveryError",
    "ConfigurationError",
    # Logging
    "configure_logging",
    "get_logger",
    "logger",
    "bind_context",
    "clear_context",
    "unbind_context",
    # Models
    "DeliveryAttempt",
    "DeliveryResult",
    "FieldAnalytics",
    "FieldDescriptor",
    "Form",
    "FormAnalytics",
    "FormResponse",
    "WebhookPayload",
    "WebhookSubscription",
]
