"""Unit tests for formpulse webhook models and payload builders."""

import json
from datetime import UTC, datetime

import pytest
from pydantic import SecretStr, ValidationError

from formpulse.models import (
    ALL_EVENT_TYPES,
    RESPONSE_SUBMITTED,
    TEST_EVENT,
    Answer,
    DeliveryAttempt,
    Form,
    FormResponse,
    PayloadAnswer,
    PayloadData,
    WebhookPayload,
    WebhookSubscription,
)
from formpulse.webhooks import build_response_submitted_payload, build_test_payload


class TestWebhookSubscription:
    """Tests for WebhookSubscription model."""

    def test_create_generates_secret(self):
        """create() should generate a 64-char hex secret."""
        sub = WebhookSubscription.create("frm_1", "https://example.com/hook")
        secret = sub.secret.get_secret_value()
        assert len(secret) == 64
        assert sub.id.startswith("whk_")

    def test_create_generates_unique_secrets(self):
        """Each subscription should get its own secret."""
        subs = [WebhookSubscription.create("frm_1", "https://example.com") for _ in range(5)]
        assert len({s.secret.get_secret_value() for s in subs}) == 5

    def test_defaults_to_response_submitted(self):
        """Subscriptions should default to all event types."""
        sub = WebhookSubscription.create("frm_1", "https://example.com")
        assert sub.events == ALL_EVENT_TYPES
        assert sub.is_active is True

    def test_secret_not_serialized(self):
        """The secret is write-only and never dumped."""
        sub = WebhookSubscription.create("frm_1", "https://example.com")
        secret = sub.secret.get_secret_value()
        dumped = sub.model_dump_json(by_alias=True)
        assert "secret" not in sub.model_dump()
        assert secret not in dumped
        assert secret not in repr(sub)

    def test_subscribes_to(self):
        """subscribes_to should check the event list."""
        sub = WebhookSubscription.create("frm_1", "https://example.com", events=["a"])
        assert sub.subscribes_to("a") is True
        assert sub.subscribes_to(RESPONSE_SUBMITTED) is False

    def test_inactive_does_not_subscribe(self):
        """Inactive subscriptions never match."""
        sub = WebhookSubscription(
            form_id="frm_1",
            url="https://example.com",
            secret=SecretStr("s"),
            is_active=False,
        )
        assert sub.subscribes_to(RESPONSE_SUBMITTED) is False

    @pytest.mark.parametrize("url", ["", "not a url", "ftp://example.com/hook", "example.com/hook"])
    def test_rejects_invalid_url(self, url):
        """Only absolute http(s) URLs are accepted."""
        with pytest.raises(ValidationError):
            WebhookSubscription.create("frm_1", url)

    def test_accepts_http_and_https(self):
        """Plain http and https endpoints are both valid."""
        for url in ("http://localhost:8080/hook", "https://hooks.example.com/formpulse"):
            sub = WebhookSubscription.create("frm_1", url)
            assert str(sub.url) == url

    def test_rotate_secret(self):
        """rotate_secret returns a copy with a new secret and the same identity."""
        sub = WebhookSubscription.create("frm_1", "https://example.com/hook")
        rotated = sub.rotate_secret()

        assert rotated.id == sub.id
        assert rotated.url == sub.url
        assert len(rotated.secret.get_secret_value()) == 64
        assert rotated.secret.get_secret_value() != sub.secret.get_secret_value()


class TestDeliveryAttempt:
    """Tests for DeliveryAttempt log entries."""

    def test_is_immutable(self):
        """Log entries cannot be modified after creation."""
        entry = DeliveryAttempt(webhook_id="whk_1", response_id="rsp_1", request_body="{}")
        with pytest.raises(ValidationError):
            entry.status_code = 200  # type: ignore[misc]

    @pytest.mark.parametrize(
        ("status", "error", "expected"),
        [
            (200, None, True),
            (204, None, True),
            (301, "HTTP 301", False),
            (500, "HTTP 500", False),
            (None, "Connection refused", False),
        ],
    )
    def test_succeeded(self, status, error, expected):
        """succeeded should reflect a 2xx status without error."""
        entry = DeliveryAttempt(
            webhook_id="whk_1",
            response_id="rsp_1",
            request_body="{}",
            status_code=status,
            error_message=error,
        )
        assert entry.succeeded is expected


class TestWebhookPayload:
    """Tests for payload serialization."""

    def test_camel_case_wire_format(self, sample_payload):
        """Body keys should be camelCase."""
        body = json.loads(sample_payload.to_json())
        assert body["event"] == RESPONSE_SUBMITTED
        assert set(body["data"]) >= {
            "formId",
            "formTitle",
            "responseId",
            "respondentId",
            "completedAt",
            "answers",
            "metadata",
        }
        assert body["data"]["answers"][0] == {
            "fieldId": "fld_name",
            "fieldTitle": "Your name",
            "fieldType": "short_text",
            "value": "Ada",
        }
        assert body["data"]["metadata"] == {
            "ipAddress": "203.0.113.7",
            "userAgent": "pytest",
            "timeTaken": 120,
        }

    def test_compact_json(self, sample_payload):
        """Serialized body should use compact separators."""
        text = sample_payload.to_json()
        assert text == json.dumps(json.loads(text), separators=(",", ":"), ensure_ascii=False)

    def test_omits_unset_optional_keys(self):
        """Unset respondent and metadata values are omitted."""
        payload = WebhookPayload(
            event=RESPONSE_SUBMITTED,
            data=PayloadData(form_id="f", form_title="t", response_id="r"),
        )
        body = json.loads(payload.to_json())
        assert "respondentId" not in body["data"]
        assert body["data"]["metadata"] == {}

    def test_keeps_null_answer_values(self):
        """A null answer value stays in the body."""
        payload = WebhookPayload(
            event=RESPONSE_SUBMITTED,
            data=PayloadData(
                form_id="f",
                form_title="t",
                response_id="r",
                answers=[PayloadAnswer(field_id="a", field_title="A", field_type="x", value=None)],
            ),
        )
        body = json.loads(payload.to_json())
        assert body["data"]["answers"][0]["value"] is None

    def test_timestamp_is_iso8601_utc(self, sample_payload):
        """Timestamp should parse as an aware UTC datetime."""
        body = json.loads(sample_payload.to_json())
        parsed = datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00"))
        assert parsed.utcoffset().total_seconds() == 0


class TestPayloadBuilders:
    """Tests for payload builder helpers."""

    def test_response_submitted_keeps_answer_order(self, sample_payload):
        """Answers should follow the stored order."""
        assert [a.field_id for a in sample_payload.data.answers] == [
            "fld_name",
            "fld_color",
            "fld_score",
        ]

    def test_response_submitted_uses_field_descriptors(self, sample_payload):
        """Titles and types should come from the field descriptors."""
        answer = sample_payload.data.answers[2]
        assert answer.field_title == "How likely?"
        assert answer.field_type == "rating"

    def test_response_submitted_falls_back_to_answer(self):
        """Without descriptors the answer's own title/type are used."""
        response = FormResponse(
            answers=[Answer(field_id="f1", field_title="Q1", field_type="email", value="a@b.c")]
        )
        payload = build_response_submitted_payload(Form(title="T"), response)
        assert payload.data.answers[0].field_title == "Q1"
        assert payload.data.answers[0].field_type == "email"

    def test_completed_at_defaults_to_now(self):
        """An incomplete response still gets a completion timestamp."""
        before = datetime.now(UTC)
        payload = build_response_submitted_payload(Form(title="T"), FormResponse())
        assert payload.data.completed_at >= before

    def test_zero_time_taken_omitted(self):
        """A zero time_taken is treated as unknown."""
        payload = build_response_submitted_payload(Form(title="T"), FormResponse(time_taken=0))
        assert payload.data.metadata.time_taken is None

    def test_test_payload(self):
        """The test payload should carry the canned test answer."""
        payload = build_test_payload("frm_1", "Survey")
        assert payload.event == TEST_EVENT
        assert payload.data.response_id == "test-response-id"
        assert payload.data.answers[0].value == "This is a test response"
        assert payload.data.metadata.time_taken == 30
