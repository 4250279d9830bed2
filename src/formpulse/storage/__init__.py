"""Storage interfaces for formpulse.

The core depends only on the abstract stores defined here; host
applications supply implementations over their own database.

Example:
    ```python
    from formpulse.storage import InMemoryStore

    store = InMemoryStore()
    subs = await store.find_active_subscriptions("frm_1", "response.submitted")
    ```
"""

from .base import MAX_LOG_PAGE_SIZE, LogStatus, ResponseStore, WebhookStore
from .memory import InMemoryStore
from .retry import storage_retry

__all__ = [
    "InMemoryStore",
    "LogStatus",
    "MAX_LOG_PAGE_SIZE",
    "ResponseStore",
    "WebhookStore",
    "storage_retry",
]
