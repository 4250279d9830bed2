"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import httpx
import pytest
from pydantic import SecretStr

from formpulse.models import (
    Answer,
    FieldDescriptor,
    Form,
    FormResponse,
    WebhookPayload,
    WebhookSubscription,
)
from formpulse.storage import InMemoryStore
from formpulse.webhooks import build_response_submitted_payload

TEST_SECRET = "whsec_test_secret_value"


class RecordingHandler:
    """httpx.MockTransport handler that replays canned statuses.

    Records every request so tests can inspect the body and headers
    that went over the wire. The last status repeats once the list is
    exhausted.
    """

    def __init__(self, statuses: list[int], body: str = "ok") -> None:
        self.statuses = statuses
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        index = min(len(self.requests), len(self.statuses) - 1)
        self.requests.append(request)
        return httpx.Response(self.statuses[index], text=self.body)


@pytest.fixture
def make_client() -> Callable[..., httpx.AsyncClient]:
    """Build an AsyncClient whose transport is the given handler."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def sample_form() -> Form:
    return Form(id="frm_test", title="Customer Survey")


@pytest.fixture
def sample_fields() -> list[FieldDescriptor]:
    return [
        FieldDescriptor(id="fld_name", title="Your name", type="short_text"),
        FieldDescriptor(id="fld_color", title="Favourite colour", type="multiple_choice"),
        FieldDescriptor(id="fld_score", title="How likely?", type="rating"),
    ]


@pytest.fixture
def sample_response() -> FormResponse:
    return FormResponse(
        id="rsp_test",
        form_id="frm_test",
        respondent_id="resp_anon_1",
        is_completed=True,
        created_at=datetime(2026, 10, 1, 12, 0, tzinfo=UTC),
        completed_at=datetime(2026, 10, 1, 12, 2, tzinfo=UTC),
        time_taken=120,
        ip_address="203.0.113.7",
        user_agent="pytest",
        answers=[
            Answer(field_id="fld_name", value="Ada"),
            Answer(field_id="fld_color", value={"value": "blue"}),
            Answer(field_id="fld_score", value=4),
        ],
    )


@pytest.fixture
def sample_payload(
    sample_form: Form,
    sample_response: FormResponse,
    sample_fields: list[FieldDescriptor],
) -> WebhookPayload:
    return build_response_submitted_payload(sample_form, sample_response, sample_fields)


@pytest.fixture
def sample_subscription() -> WebhookSubscription:
    return WebhookSubscription(
        id="whk_test",
        form_id="frm_test",
        url="https://hooks.example.com/formpulse",
        secret=SecretStr(TEST_SECRET),
    )
