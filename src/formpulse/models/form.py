"""Form, field and response records read by the analytics aggregator."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import Field

from .base import CamelModel, generate_id

# Field types with dedicated analytics
SINGLE_CHOICE_TYPES = frozenset({"multiple_choice", "dropdown"})
MULTI_CHOICE_TYPES = frozenset({"checkboxes"})
SCALE_TYPES = frozenset({"rating", "opinion_scale"})
NUMBER_TYPES = frozenset({"number"})
YES_NO_TYPES = frozenset({"yes_no"})


class Form(CamelModel):
    """The identity of a form, as embedded in webhook payloads."""

    id: str = Field(default_factory=lambda: generate_id("frm"))
    title: str


class FieldDescriptor(CamelModel):
    """A question on a form.

    Attributes:
        id: Field identifier referenced by answers.
        title: Question text.
        type: Field type (multiple_choice, checkboxes, rating, ...).
        properties: Type-specific configuration, passed through untouched.
    """

    id: str = Field(default_factory=lambda: generate_id("fld"))
    title: str
    type: str
    properties: dict[str, Any] = Field(default_factory=dict)


class Answer(CamelModel):
    """A stored answer.

    ``value`` is whatever the storage layer holds: a bare value, or an
    object wrapping it under a ``value`` key.
    """

    field_id: str
    field_title: str | None = None
    field_type: str | None = None
    value: Any = None


class FormResponse(CamelModel):
    """One respondent's submission.

    Attributes:
        id: Response identifier.
        form_id: Form this response belongs to.
        respondent_id: Anonymous respondent identity, if tracked.
        is_completed: Whether the respondent reached the end.
        created_at: When the response was started.
        completed_at: When the response was completed.
        time_taken: Seconds spent filling the form.
        ip_address: Submitter address.
        user_agent: Submitter user agent.
        answers: Answers in submission order.
    """

    id: str = Field(default_factory=lambda: generate_id("rsp"))
    form_id: str | None = None
    respondent_id: str | None = None
    is_completed: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    time_taken: int | float | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    answers: list[Answer] = Field(default_factory=list)
