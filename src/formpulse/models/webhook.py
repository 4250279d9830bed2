"""Webhook models for form event notifications.

Provides subscription registration, the outbound event payload, and
the append-only delivery log.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from math import ceil
from typing import Any

from pydantic import ConfigDict, Field, HttpUrl, SecretStr

from .base import CamelModel, generate_id

RESPONSE_SUBMITTED = "response.submitted"
TEST_EVENT = "test"

# Events a subscription may register for
ALL_EVENT_TYPES: list[str] = [RESPONSE_SUBMITTED]


class WebhookSubscription(CamelModel):
    """A receiver registration owned by a form.

    The secret is write-only: it is excluded from serialization and
    masked in repr, so it can only be read deliberately through
    ``secret.get_secret_value()``.

    Attributes:
        id: Unique identifier for this subscription.
        form_id: Form that owns the subscription.
        url: Endpoint that receives POSTed events.
        secret: Shared secret for HMAC-SHA256 signatures.
        events: Event names this subscription receives.
        is_active: Whether deliveries are attempted at all.
        created_at: When the subscription was registered.
    """

    id: str = Field(default_factory=lambda: generate_id("whk"))
    form_id: str = Field(description="Form that owns this subscription")
    url: HttpUrl = Field(description="HTTP(S) endpoint receiving webhook events")
    secret: SecretStr = Field(exclude=True, repr=False, description="Shared HMAC secret")
    events: list[str] = Field(
        default_factory=lambda: list(ALL_EVENT_TYPES),
        description="Event names to subscribe to",
    )
    is_active: bool = Field(default=True, description="Whether the subscription is active")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        form_id: str,
        url: str,
        events: list[str] | None = None,
    ) -> WebhookSubscription:
        """Register a new subscription with a freshly generated secret."""
        from formpulse.webhooks.signature import new_secret

        return cls(
            form_id=form_id,
            url=url,
            secret=SecretStr(new_secret()),
            events=events if events is not None else list(ALL_EVENT_TYPES),
        )

    def rotate_secret(self) -> WebhookSubscription:
        """Return a copy of this subscription with a freshly generated secret.

        Receivers must switch to the new secret; signatures made with the
        old one no longer verify.
        """
        from formpulse.webhooks.signature import new_secret

        return self.model_copy(update={"secret": SecretStr(new_secret())})

    def subscribes_to(self, event: str) -> bool:
        """Check if this subscription is active and listens for the event."""
        return self.is_active and event in self.events


class PayloadAnswer(CamelModel):
    """One answered field inside a webhook payload."""

    field_id: str
    field_title: str
    field_type: str
    value: Any = None


class PayloadMetadata(CamelModel):
    """Request metadata captured with the response."""

    ip_address: str | None = None
    user_agent: str | None = None
    time_taken: int | float | None = None


class PayloadData(CamelModel):
    """The data envelope of a webhook payload."""

    form_id: str
    form_title: str
    response_id: str
    respondent_id: str | None = None
    completed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    answers: list[PayloadAnswer] = Field(default_factory=list)
    metadata: PayloadMetadata = Field(default_factory=PayloadMetadata)


class WebhookPayload(CamelModel):
    """Event payload POSTed to subscribers.

    Built fresh for every delivery and never stored on its own; the
    serialized form is embedded in each DeliveryAttempt.
    """

    event: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    data: PayloadData

    def to_json(self) -> str:
        """Serialize to the compact JSON body that gets signed and sent.

        Unset optional envelope keys are omitted. Answer values are kept
        even when null.
        """
        body = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        body["data"]["answers"] = [
            answer.model_dump(mode="json", by_alias=True) for answer in self.data.answers
        ]
        return json.dumps(body, separators=(",", ":"), ensure_ascii=False)


class DeliveryAttempt(CamelModel):
    """Immutable log entry for one delivery try.

    Attributes:
        id: Unique identifier for this attempt.
        webhook_id: Subscription the attempt was made for.
        response_id: Form response that triggered the event.
        attempt: 1-based attempt number within its delivery.
        status_code: HTTP status, or None if no response arrived.
        request_body: Exact JSON body that was sent.
        response_body: Subscriber's response body (truncated).
        error_message: Failure description, None on success.
        attempted_at: When the attempt finished.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: generate_id("dlv"))
    webhook_id: str
    response_id: str
    attempt: int = Field(default=1, ge=1)
    status_code: int | None = None
    request_body: str
    response_body: str | None = None
    error_message: str | None = None
    attempted_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def succeeded(self) -> bool:
        """True when a 2xx response arrived and no error was recorded."""
        return (
            self.status_code is not None
            and 200 <= self.status_code < 300
            and self.error_message is None
        )


class DeliveryResult(CamelModel):
    """Outcome of a delivery (or of a single attempt)."""

    success: bool
    status_code: int | None = None
    response_body: str | None = None
    error_message: str | None = None


class DeliveryLogPage(CamelModel):
    """One page of delivery log entries, newest first."""

    logs: list[DeliveryAttempt]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return ceil(self.total / self.limit) if self.limit else 0


__all__ = [
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
]
