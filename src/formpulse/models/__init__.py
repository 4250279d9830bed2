"""Data models for formpulse.

Webhook Types:
    - WebhookSubscription: Receiver registration with a write-only secret
    - WebhookPayload: Outbound event body (built per delivery)
    - DeliveryAttempt: Append-only delivery log entry
    - DeliveryResult: Outcome returned by the delivery service

Form Types:
    - Form, FieldDescriptor, FormResponse, Answer

Analytics Types:
    - FormAnalytics, FieldAnalytics, DailyCount
"""

from .analytics import DailyCount, FieldAnalytics, FormAnalytics
from .base import CamelModel, generate_id
from .form import Answer, FieldDescriptor, Form, FormResponse
from .webhook import (
    ALL_EVENT_TYPES,
    RESPONSE_SUBMITTED,
    TEST_EVENT,
    DeliveryAttempt,
    DeliveryLogPage,
    DeliveryResult,
    PayloadAnswer,
    PayloadData,
    PayloadMetadata,
    WebhookPayload,
    WebhookSubscription,
)

__all__ = [
    # Base
    "CamelModel",
    "generate_id",
    # Webhooks
    "ALL_EVENT_TYPES",
    "RESPONSE_SUBMITTED",
    "TEST_EVENT",
    "DeliveryAttempt",
    "DeliveryLogPage",
    "DeliveryResult",
    "PayloadAnswer",
    "PayloadData",
    "PayloadMetadata",
    "WebhookPayload",
    "WebhookSubscription",
    # Forms
    "Answer",
    "FieldDescriptor",
    "Form",
    "FormResponse",
    # Analytics
    "DailyCount",
    "FieldAnalytics",
    "FormAnalytics",
]
