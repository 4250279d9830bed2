"""Response analytics for forms.

``calculate_form_analytics`` is pure and synchronous: it takes every
response of a form plus the form's fields and returns fresh statistics.
Malformed answers are skipped rather than raising.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime, time, timedelta
from typing import Any

from formpulse.models import (
    Answer,
    DailyCount,
    FieldAnalytics,
    FieldDescriptor,
    FormAnalytics,
    FormResponse,
)
from formpulse.models.form import (
    MULTI_CHOICE_TYPES,
    NUMBER_TYPES,
    SCALE_TYPES,
    SINGLE_CHOICE_TYPES,
    YES_NO_TYPES,
)

WINDOW_DAYS = 30

YES_VALUES = (True, "true", "yes", "Yes")
NO_VALUES = (False, "false", "no", "No")


def round_half_up(value: float, places: int = 0) -> float:
    """Round with halves going up (towards +inf), unlike built-in round()."""
    factor = 10**places
    return math.floor(value * factor + 0.5) / factor


def _percent(count: int, total: int) -> int:
    return int(round_half_up(count / total * 100)) if total > 0 else 0


def extract_value(value: Any) -> Any:
    """Unwrap one level of ``{"value": ...}`` storage wrapping.

    Some storage layers keep answers as ``{"value": x, ...}`` objects.
    Exactly one level is removed; anything else is returned unchanged.
    """
    if isinstance(value, dict) and "value" in value:
        return value["value"]
    return value


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _to_number(value: Any) -> int | float | None:
    """Coerce an answer to a finite number, or None if it isn't one.

    Booleans and blank strings are not numbers here.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() else number
    return None


def _normalize_number(value: int | float) -> int | float:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _option_key(value: Any) -> str:
    """String key for tallying an option value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, list):
        return ",".join(_option_key(v) for v in value)
    return str(value)


def _as_utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)


def calculate_form_analytics(
    responses: Sequence[FormResponse],
    fields: Sequence[FieldDescriptor],
    now: datetime | None = None,
    days: int = WINDOW_DAYS,
) -> FormAnalytics:
    """Calculate analytics for a form's responses.

    Args:
        responses: Every response of the form, answers included.
        fields: The form's fields; one FieldAnalytics is produced per field.
        now: Reference time for the daily series. Defaults to the current time.
        days: Number of daily buckets in the series.

    Returns:
        A new FormAnalytics.
    """
    total = len(responses)
    completed = sum(1 for r in responses if r.is_completed)
    completion_rate = completed / total * 100 if total > 0 else 0.0

    times = [r.time_taken for r in responses if r.time_taken is not None and r.time_taken > 0]
    average_time = int(round_half_up(sum(times) / len(times))) if times else None

    answers_by_field: dict[str, list[Answer]] = {}
    for response in responses:
        for answer in response.answers:
            answers_by_field.setdefault(answer.field_id, []).append(answer)

    return FormAnalytics(
        total_responses=total,
        completed_responses=completed,
        incomplete_responses=total - completed,
        completion_rate=completion_rate,
        average_completion_time=average_time,
        responses_over_time=responses_over_time(responses, now=now, days=days),
        field_analytics={
            field.id: calculate_field_analytics(field, answers_by_field.get(field.id, []))
            for field in fields
        },
    )


def responses_over_time(
    responses: Iterable[FormResponse],
    now: datetime | None = None,
    days: int = WINDOW_DAYS,
) -> list[DailyCount]:
    """Count responses per UTC day for the ``days`` days ending today.

    Responses created before the first day or after ``now`` are dropped.
    """
    now = _as_utc(now or datetime.now(UTC))
    first_day = now.date() - timedelta(days=days - 1)
    window_start = datetime.combine(first_day, time.min, tzinfo=UTC)

    counts = {(first_day + timedelta(days=i)).isoformat(): 0 for i in range(days)}
    for response in responses:
        created = _as_utc(response.created_at)
        if window_start <= created <= now:
            counts[created.date().isoformat()] += 1

    return [DailyCount(date=day, count=count) for day, count in counts.items()]


def calculate_field_analytics(field: FieldDescriptor, answers: Sequence[Answer]) -> FieldAnalytics:
    """Calculate analytics for a single field from its answers."""
    base = FieldAnalytics(
        field_id=field.id,
        field_title=field.title,
        field_type=field.type,
        total_answers=len(answers),
    )
    values = [extract_value(a.value) for a in answers]

    if field.type in SINGLE_CHOICE_TYPES:
        return _choice_analytics(base, values)
    if field.type in MULTI_CHOICE_TYPES:
        return _checkbox_analytics(base, values)
    if field.type in SCALE_TYPES:
        return _rating_analytics(base, values)
    if field.type in NUMBER_TYPES:
        return _number_analytics(base, values)
    if field.type in YES_NO_TYPES:
        return _yes_no_analytics(base, values)

    base.response_count = sum(1 for v in values if not _is_empty(v))
    return base


def _choice_analytics(base: FieldAnalytics, values: list[Any]) -> FieldAnalytics:
    counts = Counter(_option_key(v) for v in values if not _is_empty(v))
    total = sum(counts.values())
    base.option_counts = dict(counts)
    base.option_percentages = {option: _percent(n, total) for option, n in counts.items()}
    return base


def _checkbox_analytics(base: FieldAnalytics, values: list[Any]) -> FieldAnalytics:
    # Percentages are per selection, not per respondent
    counts = Counter(_option_key(item) for v in values if isinstance(v, list) for item in v)
    total_selections = sum(counts.values())
    base.option_counts = dict(counts)
    base.option_percentages = {
        option: _percent(n, total_selections) for option, n in counts.items()
    }
    return base


def _numbers(values: list[Any]) -> list[int | float]:
    return [n for n in (_to_number(v) for v in values) if n is not None]


def _rating_analytics(base: FieldAnalytics, values: list[Any]) -> FieldAnalytics:
    numbers = _numbers(values)
    if not numbers:
        return base

    base.average_rating = round_half_up(sum(numbers) / len(numbers), 1)
    base.rating_distribution = dict(Counter(_normalize_number(n) for n in numbers))
    return base


def _number_analytics(base: FieldAnalytics, values: list[Any]) -> FieldAnalytics:
    numbers = _numbers(values)
    if not numbers:
        return base

    base.average = round_half_up(sum(numbers) / len(numbers), 2)
    base.min = min(numbers)
    base.max = max(numbers)
    return base


def _yes_no_analytics(base: FieldAnalytics, values: list[Any]) -> FieldAnalytics:
    yes = sum(1 for v in values if _matches(v, YES_VALUES))
    no = sum(1 for v in values if _matches(v, NO_VALUES))
    total = yes + no
    base.option_counts = {"Yes": yes, "No": no}
    base.option_percentages = {"Yes": _percent(yes, total), "No": _percent(no, total)}
    return base


def _matches(value: Any, accepted: tuple[Any, ...]) -> bool:
    # Identity for booleans so 1 and 0 are not taken as True/False
    if isinstance(value, bool):
        return any(value is a for a in accepted)
    return isinstance(value, str) and value in accepted


def format_completion_time(seconds: int | None) -> str:
    """Format a completion time for display: "-", "45s", "2m 5s", "1h 1m"."""
    if seconds is None:
        return "-"
    if seconds < 60:
        return f"{seconds}s"
    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {secs}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m"
