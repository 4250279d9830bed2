"""Derived analytics models.

These are recomputed on every request from the full answer set and are
never persisted.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from .base import CamelModel


class DailyCount(CamelModel):
    """Responses created on one UTC calendar day."""

    date: str
    count: int = 0


class FieldAnalytics(CamelModel):
    """Per-field statistics.

    Only the statistics relevant to the field's type are set; the rest
    stay None and are dropped from the serialized form.

    ``option_percentages`` sums to about 100 only when every answer lands
    in exactly one bucket. Checkbox percentages are relative to the total
    number of selections, so they need not.
    """

    field_id: str
    field_title: str
    field_type: str
    total_answers: int = 0

    # multiple_choice, dropdown, checkboxes, yes_no
    option_counts: dict[str, int] | None = None
    option_percentages: dict[str, int] | None = None

    # rating, opinion_scale
    average_rating: float | None = None
    rating_distribution: dict[int | float, int] | None = None

    # number
    average: float | None = None
    min: int | float | None = None
    max: int | float | None = None

    # free text and other types
    response_count: int | None = None


class FormAnalytics(CamelModel):
    """Aggregate statistics for one form."""

    total_responses: int = 0
    completed_responses: int = 0
    incomplete_responses: int = 0
    completion_rate: float = 0.0
    average_completion_time: int | None = None
    responses_over_time: list[DailyCount] = Field(default_factory=list)
    field_analytics: dict[str, FieldAnalytics] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready camelCase form returned to reporting endpoints.

        ``averageCompletionTime`` is always present (null means no data);
        unset per-field statistics are omitted.
        """
        result = self.model_dump(mode="json", by_alias=True, exclude={"field_analytics"})
        result["fieldAnalytics"] = {
            field_id: analytics.model_dump(mode="json", by_alias=True, exclude_none=True)
            for field_id, analytics in self.field_analytics.items()
        }
        return result
