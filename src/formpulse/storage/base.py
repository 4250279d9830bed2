"""Persistence interfaces consumed by the formpulse core.

The core never talks to a database directly. A host application
implements these interfaces over its own schema (row-level tenant
filtering included); ``InMemoryStore`` is the reference implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from formpulse.models import (
        DeliveryAttempt,
        DeliveryLogPage,
        FieldDescriptor,
        Form,
        FormResponse,
        WebhookSubscription,
    )

LogStatus = Literal["success", "failed"]

# Upper bound on a delivery log page
MAX_LOG_PAGE_SIZE = 100


class WebhookStore(ABC):
    """Storage for webhook subscriptions and their delivery log.

    Example:
        ```python
        subs = await store.find_active_subscriptions("frm_1", "response.submitted")
        await store.append_delivery_log(attempt)
        ```
    """

    @abstractmethod
    async def find_active_subscriptions(
        self,
        form_id: str,
        event: str,
    ) -> list[WebhookSubscription]:
        """Get all active subscriptions of a form that listen for an event.

        Args:
            form_id: Form that raised the event.
            event: Event name (e.g. "response.submitted").

        Returns:
            Matching subscriptions, possibly empty.
        """
        ...

    @abstractmethod
    async def append_delivery_log(self, entry: DeliveryAttempt) -> None:
        """Append one attempt to the delivery log.

        Entries are never updated or deleted afterwards.

        Raises:
            StorageError: If the write fails.
        """
        ...

    @abstractmethod
    async def get_subscription(self, subscription_id: str) -> WebhookSubscription | None:
        """Get a subscription by ID, or None if it does not exist."""
        ...

    @abstractmethod
    async def save_subscription(self, subscription: WebhookSubscription) -> str:
        """Insert or replace a subscription; returns its ID."""
        ...

    @abstractmethod
    async def list_delivery_logs(
        self,
        webhook_id: str,
        status: LogStatus | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> DeliveryLogPage:
        """List a subscription's delivery log, newest first.

        Args:
            webhook_id: Subscription to list.
            status: "success" for 2xx attempts, "failed" for the rest.
            page: 1-based page number.
            limit: Page size, capped at MAX_LOG_PAGE_SIZE.
        """
        ...


class ResponseStore(ABC):
    """Read access to forms, fields and responses for analytics."""

    @abstractmethod
    async def get_form(self, form_id: str) -> Form | None:
        """Get a form by ID, or None if it does not exist."""
        ...

    @abstractmethod
    async def get_fields(self, form_id: str) -> list[FieldDescriptor]:
        """Get a form's fields in display order."""
        ...

    @abstractmethod
    async def list_responses(self, form_id: str) -> list[FormResponse]:
        """Get every response of a form, answers included."""
        ...
