"""Webhook delivery with HMAC signatures and a bounded retry loop.

Each delivery makes up to three sequential attempts, sleeping 1s and
then 5s between them, and appends every attempt to the delivery log.
Failures come back as DeliveryResult values; nothing is raised into
the caller. Fan-out spawns one background task per subscription and
returns without waiting for them.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

import httpx

from formpulse.config import settings
from formpulse.exceptions import DeliveryError, NotFoundError
from formpulse.models import (
    RESPONSE_SUBMITTED,
    DeliveryAttempt,
    DeliveryResult,
    WebhookPayload,
)
from formpulse.storage.retry import storage_retry

from .payloads import TEST_RESPONSE_ID, build_response_submitted_payload, build_test_payload
from .signature import build_headers

if TYPE_CHECKING:
    from formpulse.models import FieldDescriptor, Form, FormResponse, WebhookSubscription
    from formpulse.storage import WebhookStore

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
RETRY_DELAYS: tuple[float, ...] = (1.0, 5.0, 30.0)


def serialize_payload(payload: WebhookPayload | dict[str, Any]) -> str:
    """Serialize a payload to the compact JSON body that is signed and sent."""
    if isinstance(payload, WebhookPayload):
        return payload.to_json()
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def _correlation_id(payload: WebhookPayload | dict[str, Any]) -> str:
    if isinstance(payload, WebhookPayload):
        return payload.data.response_id
    data = payload.get("data") if isinstance(payload, Mapping) else None
    if not isinstance(data, Mapping):
        return ""
    return str(data.get("responseId", ""))


class WebhookDeliveryService:
    """Delivers signed webhook payloads to subscriber URLs.

    Handles:
    - Serializing the payload once and signing exactly those bytes
    - Up to MAX_ATTEMPTS POSTs, each cancelled after the timeout
    - Logging every attempt through the store
    - Fire-and-forget fan-out to all active subscriptions of a form

    Example:
        ```python
        service = WebhookDeliveryService(store)

        # Deliver to one subscriber and wait for the outcome
        result = await service.deliver(sub.id, str(sub.url), secret, payload, response.id)

        # Notify every subscriber without waiting
        tasks = await service.fire_webhooks(form.id, "response.submitted", payload)
        ```
    """

    def __init__(
        self,
        store: WebhookStore,
        timeout_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
        retry_delays: Sequence[float] = RETRY_DELAYS,
        max_response_body: int | None = None,
    ) -> None:
        """Initialize the delivery service.

        Args:
            store: Persistence for subscriptions and the delivery log.
            timeout_seconds: Per-attempt timeout. Defaults to settings.
            client: Shared HTTP client. A short-lived client is opened
                per attempt when omitted.
            retry_delays: Seconds to sleep after each failed attempt.
            max_response_body: Characters of response body to keep.
        """
        self._store = store
        self._timeout = (
            timeout_seconds if timeout_seconds is not None else settings.webhook_timeout_seconds
        )
        self._client = client
        self._retry_delays = tuple(retry_delays)
        self._max_response_body = (
            max_response_body
            if max_response_body is not None
            else settings.webhook_max_response_body
        )
        self._tasks: set[asyncio.Task[DeliveryResult | None]] = set()

    @property
    def pending_count(self) -> int:
        """Number of background deliveries still running."""
        return len(self._tasks)

    async def deliver(
        self,
        subscription_id: str,
        url: str,
        secret: str,
        payload: WebhookPayload | dict[str, Any],
        correlation_id: str,
    ) -> DeliveryResult:
        """Deliver a payload with retries.

        Args:
            subscription_id: Subscription being delivered to (for the log).
            url: Subscriber endpoint.
            secret: Shared secret for the signature.
            payload: Payload model or an already-shaped dict.
            correlation_id: Response that triggered the event.

        Returns:
            The first successful attempt's result, or a failure summary
            after MAX_ATTEMPTS.
        """
        body = serialize_payload(payload)
        headers = build_headers(body, secret)
        headers["User-Agent"] = settings.webhook_user_agent

        last = DeliveryResult(success=False)
        for attempt in range(1, MAX_ATTEMPTS + 1):
            result = await self._attempt_delivery(url, body, headers)
            await self._log_attempt(subscription_id, correlation_id, attempt, body, result)

            if result.success:
                logger.info(
                    "Webhook delivered: %s to %s (status %s, attempt %d)",
                    subscription_id,
                    url,
                    result.status_code,
                    attempt,
                )
                return result

            last = result
            logger.warning(
                "Webhook attempt %d/%d failed: %s to %s (%s)",
                attempt,
                MAX_ATTEMPTS,
                subscription_id,
                url,
                result.error_message,
            )
            if attempt < MAX_ATTEMPTS:
                await asyncio.sleep(self._delay_after(attempt))

        logger.error(
            "Webhook delivery gave up: %s to %s after %d attempts",
            subscription_id,
            url,
            MAX_ATTEMPTS,
        )
        return DeliveryResult(
            success=False,
            status_code=last.status_code,
            response_body=last.response_body,
            error_message=f"Failed after {MAX_ATTEMPTS} attempts (last error: {last.error_message})",
        )

    def _delay_after(self, attempt: int) -> float:
        if not self._retry_delays:
            return 0.0
        index = min(attempt - 1, len(self._retry_delays) - 1)
        return self._retry_delays[index]

    async def _attempt_delivery(
        self,
        url: str,
        body: str,
        headers: dict[str, str],
    ) -> DeliveryResult:
        """Make one POST; every failure mode is returned as a result."""
        content = body.encode("utf-8")
        try:
            async with asyncio.timeout(self._timeout):
                if self._client is not None:
                    response = await self._client.post(url, content=content, headers=headers)
                else:
                    async with httpx.AsyncClient(timeout=self._timeout) as client:
                        response = await client.post(url, content=content, headers=headers)
        except (TimeoutError, httpx.TimeoutException):
            return DeliveryResult(
                success=False,
                error_message=f"Request timed out after {self._timeout:g}s",
            )
        except httpx.HTTPError as e:
            return DeliveryResult(success=False, error_message=str(e) or type(e).__name__)
        except Exception as e:
            logger.exception("Webhook delivery error: %s", e)
            return DeliveryResult(success=False, error_message=f"Unexpected error: {e}")

        ok = 200 <= response.status_code < 300
        return DeliveryResult(
            success=ok,
            status_code=response.status_code,
            response_body=(response.text or "")[: self._max_response_body],
            error_message=None if ok else f"HTTP {response.status_code}",
        )

    async def _log_attempt(
        self,
        subscription_id: str,
        correlation_id: str,
        attempt: int,
        body: str,
        result: DeliveryResult,
    ) -> None:
        entry = DeliveryAttempt(
            webhook_id=subscription_id,
            response_id=correlation_id,
            attempt=attempt,
            status_code=result.status_code,
            request_body=body,
            response_body=result.response_body,
            error_message=result.error_message,
        )
        try:
            await self._append_log(entry)
        except Exception:
            # A lost log row must not abort the delivery itself
            logger.exception(
                "Failed to log webhook attempt %d for %s", attempt, subscription_id
            )

    @storage_retry
    async def _append_log(self, entry: DeliveryAttempt) -> None:
        await self._store.append_delivery_log(entry)

    async def fire_webhooks(
        self,
        form_id: str,
        event: str,
        payload: WebhookPayload | dict[str, Any],
    ) -> list[asyncio.Task[DeliveryResult | None]]:
        """Dispatch an event to every active subscription without waiting.

        Each delivery runs as its own task and still goes through the
        full retry loop. Task failures are caught and logged per
        subscription.

        Args:
            form_id: Form that raised the event.
            event: Event name to match against subscriptions.
            payload: Payload to deliver.

        Returns:
            The spawned tasks (already scheduled); callers may ignore them.
        """
        try:
            subscriptions = await self._store.find_active_subscriptions(form_id, event)
        except Exception:
            logger.exception("Failed to look up webhooks for form %s", form_id)
            return []

        if not subscriptions:
            logger.debug("No webhooks subscribed to %s for form %s", event, form_id)
            return []

        correlation_id = _correlation_id(payload)
        tasks: list[asyncio.Task[DeliveryResult | None]] = []
        for subscription in subscriptions:
            task = asyncio.create_task(
                self._deliver_in_background(subscription, payload, correlation_id),
                name=f"webhook-{subscription.id}",
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            tasks.append(task)

        logger.info("Dispatched %s to %d webhook(s) for form %s", event, len(tasks), form_id)
        return tasks

    async def _deliver_in_background(
        self,
        subscription: WebhookSubscription,
        payload: WebhookPayload | dict[str, Any],
        correlation_id: str,
    ) -> DeliveryResult | None:
        try:
            return await self.deliver(
                subscription.id,
                str(subscription.url),
                subscription.secret.get_secret_value(),
                payload,
                correlation_id,
            )
        except Exception as e:
            error = DeliveryError(subscription.id, str(e))
            logger.error("Webhook delivery failed: %s", error, exc_info=True)
            return None

    async def notify_response_submitted(
        self,
        form: Form,
        response: FormResponse,
        fields: list[FieldDescriptor] | None = None,
    ) -> list[asyncio.Task[DeliveryResult | None]]:
        """Build the ``response.submitted`` payload and fan it out."""
        payload = build_response_submitted_payload(form, response, fields)
        return await self.fire_webhooks(form.id, RESPONSE_SUBMITTED, payload)

    async def send_test_webhook(
        self,
        subscription_id: str,
        form_title: str,
        form_id: str | None = None,
    ) -> DeliveryResult:
        """Deliver the canned test event to one subscription and wait for it.

        Args:
            subscription_id: Subscription to test.
            form_title: Title placed in the test payload.
            form_id: When given, the subscription must belong to this form.

        Raises:
            NotFoundError: If the subscription does not exist or belongs
                to another form.
        """
        subscription = await self._store.get_subscription(subscription_id)
        if subscription is None or (form_id is not None and subscription.form_id != form_id):
            raise NotFoundError("webhook", subscription_id)

        payload = build_test_payload(subscription.form_id, form_title)
        return await self.deliver(
            subscription.id,
            str(subscription.url),
            subscription.secret.get_secret_value(),
            payload,
            TEST_RESPONSE_ID,
        )

    async def drain(self) -> None:
        """Wait for every background delivery to finish (e.g. on shutdown)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
