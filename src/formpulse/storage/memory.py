"""In-process implementation of the formpulse storage interfaces.

Holds everything in dictionaries. Suitable for tests, demos and
single-process embedding; state is lost on restart.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from formpulse.exceptions import ValidationError
from formpulse.models import DeliveryLogPage

from .base import MAX_LOG_PAGE_SIZE, LogStatus, ResponseStore, WebhookStore

if TYPE_CHECKING:
    from formpulse.models import (
        DeliveryAttempt,
        FieldDescriptor,
        Form,
        FormResponse,
        WebhookSubscription,
    )


class InMemoryStore(WebhookStore, ResponseStore):
    """Dictionary-backed WebhookStore and ResponseStore.

    Example:
        ```python
        store = InMemoryStore()
        store.add_form(form, fields)
        await store.save_subscription(WebhookSubscription.create(form.id, url))
        ```
    """

    def __init__(self) -> None:
        self._subscriptions: dict[str, WebhookSubscription] = {}
        self._delivery_logs: list[DeliveryAttempt] = []
        self._forms: dict[str, Form] = {}
        self._fields: dict[str, list[FieldDescriptor]] = {}
        self._responses: dict[str, list[FormResponse]] = {}

    # Webhooks

    async def find_active_subscriptions(
        self,
        form_id: str,
        event: str,
    ) -> list[WebhookSubscription]:
        return [
            sub
            for sub in self._subscriptions.values()
            if sub.form_id == form_id and sub.subscribes_to(event)
        ]

    async def append_delivery_log(self, entry: DeliveryAttempt) -> None:
        self._delivery_logs.append(entry)

    async def get_subscription(self, subscription_id: str) -> WebhookSubscription | None:
        return self._subscriptions.get(subscription_id)

    async def save_subscription(self, subscription: WebhookSubscription) -> str:
        self._subscriptions[subscription.id] = subscription
        return subscription.id

    async def list_delivery_logs(
        self,
        webhook_id: str,
        status: LogStatus | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> DeliveryLogPage:
        if status not in (None, "success", "failed"):
            raise ValidationError("status", f"expected 'success' or 'failed', got {status!r}")
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_LOG_PAGE_SIZE)

        entries = [e for e in self._delivery_logs if e.webhook_id == webhook_id]
        if status == "success":
            entries = [e for e in entries if e.succeeded]
        elif status == "failed":
            entries = [e for e in entries if not e.succeeded]

        # Insertion order breaks ties between identical timestamps
        ordered = [
            e
            for _, e in sorted(
                enumerate(entries),
                key=lambda pair: (pair[1].attempted_at, pair[0]),
                reverse=True,
            )
        ]
        start = (page - 1) * limit
        return DeliveryLogPage(
            logs=ordered[start : start + limit],
            page=page,
            limit=limit,
            total=len(ordered),
        )

    @property
    def delivery_logs(self) -> list[DeliveryAttempt]:
        """All logged attempts in insertion order (a copy)."""
        return list(self._delivery_logs)

    # Forms and responses

    def add_form(self, form: Form, fields: list[FieldDescriptor] | None = None) -> None:
        """Register a form and its ordered fields."""
        self._forms[form.id] = form
        self._fields[form.id] = list(fields or [])
        self._responses.setdefault(form.id, [])

    def add_response(self, form_id: str, response: FormResponse) -> None:
        """Record a response for a registered form."""
        self._responses.setdefault(form_id, []).append(response)

    async def get_form(self, form_id: str) -> Form | None:
        return self._forms.get(form_id)

    async def get_fields(self, form_id: str) -> list[FieldDescriptor]:
        return list(self._fields.get(form_id, []))

    async def list_responses(self, form_id: str) -> list[FormResponse]:
        return list(self._responses.get(form_id, []))
