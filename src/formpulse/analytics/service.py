"""Read-side entry point that feeds stored responses to the aggregator."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from formpulse.config import settings
from formpulse.exceptions import NotFoundError

from .aggregator import calculate_form_analytics

if TYPE_CHECKING:
    from formpulse.models import FormAnalytics
    from formpulse.storage import ResponseStore

logger = logging.getLogger(__name__)


class AnalyticsService:
    """Computes form analytics on demand from a ResponseStore.

    Nothing is cached; every call rescans the full response set.
    """

    def __init__(self, store: ResponseStore) -> None:
        self._store = store

    async def form_analytics(self, form_id: str) -> FormAnalytics:
        """Load a form's fields and responses and aggregate them.

        Raises:
            NotFoundError: If the form does not exist.
        """
        form = await self._store.get_form(form_id)
        if form is None:
            raise NotFoundError("form", form_id)

        fields = await self._store.get_fields(form_id)
        responses = await self._store.list_responses(form_id)
        logger.debug(
            "Calculating analytics for form %s (%d responses, %d fields)",
            form_id,
            len(responses),
            len(fields),
        )
        return calculate_form_analytics(responses, fields, days=settings.analytics_window_days)
