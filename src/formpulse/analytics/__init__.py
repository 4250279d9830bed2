"""Form response analytics.

Example:
    ```python
    from formpulse.analytics import calculate_form_analytics

    analytics = calculate_form_analytics(responses, fields)
    print(analytics.completion_rate, analytics.to_dict()["fieldAnalytics"])
    ```
"""

from .aggregator import (
    WINDOW_DAYS,
    calculate_field_analytics,
    calculate_form_analytics,
    extract_value,
    format_completion_time,
    responses_over_time,
    round_half_up,
)
from .service import AnalyticsService

__all__ = [
    "WINDOW_DAYS",
    "AnalyticsService",
    "calculate_field_analytics",
    "calculate_form_analytics",
    "extract_value",
    "format_completion_time",
    "responses_over_time",
    "round_half_up",
]
