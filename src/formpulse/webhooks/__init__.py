"""Webhook signing and delivery for formpulse.

Provides HMAC-signed webhook delivery with a fixed three-attempt retry.

Example:
    ```python
    from formpulse.webhooks import WebhookDeliveryService, verify_headers

    # Sender side
    service = WebhookDeliveryService(store)
    await service.notify_response_submitted(form, response, fields)

    # Receiver side
    ok = verify_headers(request_body, request_headers, secret)
    ```
"""

from .delivery import MAX_ATTEMPTS, RETRY_DELAYS, WebhookDeliveryService, serialize_payload
from .payloads import build_response_submitted_payload, build_test_payload
from .signature import build_headers, new_secret, sign, verify, verify_headers

__all__ = [
    "MAX_ATTEMPTS",
    "RETRY_DELAYS",
    "WebhookDeliveryService",
    "build_headers",
    "build_response_submitted_payload",
    "build_test_payload",
    "new_secret",
    "serialize_payload",
    "sign",
    "verify",
    "verify_headers",
]
