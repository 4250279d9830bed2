"""Builders for outbound webhook payloads."""

from __future__ import annotations

from datetime import UTC, datetime

from formpulse.models import (
    RESPONSE_SUBMITTED,
    TEST_EVENT,
    FieldDescriptor,
    Form,
    FormResponse,
    PayloadAnswer,
    PayloadData,
    PayloadMetadata,
    WebhookPayload,
)

TEST_RESPONSE_ID = "test-response-id"


def build_response_submitted_payload(
    form: Form,
    response: FormResponse,
    fields: list[FieldDescriptor] | None = None,
) -> WebhookPayload:
    """Build the ``response.submitted`` payload for a stored response.

    Answers keep their stored order. A field's title and type come from
    ``fields`` when given, otherwise from the answer itself.

    Args:
        form: The form the response belongs to.
        response: The submitted response, answers included.
        fields: The form's field descriptors.

    Returns:
        A fresh WebhookPayload timestamped now.
    """
    by_id = {f.id: f for f in fields or []}
    answers = []
    for answer in response.answers:
        descriptor = by_id.get(answer.field_id)
        answers.append(
            PayloadAnswer(
                field_id=answer.field_id,
                field_title=descriptor.title if descriptor else answer.field_title or "",
                field_type=descriptor.type if descriptor else answer.field_type or "unknown",
                value=answer.value,
            )
        )

    # Falsy time_taken (None or 0) is treated as not recorded
    return WebhookPayload(
        event=RESPONSE_SUBMITTED,
        data=PayloadData(
            form_id=form.id,
            form_title=form.title,
            response_id=response.id,
            respondent_id=response.respondent_id or None,
            completed_at=response.completed_at or datetime.now(UTC),
            answers=answers,
            metadata=PayloadMetadata(
                ip_address=response.ip_address or None,
                user_agent=response.user_agent or None,
                time_taken=response.time_taken or None,
            ),
        ),
    )


def build_test_payload(form_id: str, form_title: str) -> WebhookPayload:
    """Build the canned ``test`` event used to check a subscription."""
    return WebhookPayload(
        event=TEST_EVENT,
        data=PayloadData(
            form_id=form_id,
            form_title=form_title,
            response_id=TEST_RESPONSE_ID,
            respondent_id="test-respondent-id",
            answers=[
                PayloadAnswer(
                    field_id="test-field-id",
                    field_title="Test Question",
                    field_type="short_text",
                    value="This is a test response",
                )
            ],
            metadata=PayloadMetadata(
                ip_address="127.0.0.1",
                user_agent="Test Agent",
                time_taken=30,
            ),
        ),
    )
