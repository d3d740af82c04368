"""
Unit tests for the shared contact validation rules.
"""

import pytest
from fastapi import HTTPException

from portfolio_api.contact.schemas import ContactSubmission
from portfolio_api.contact.validation import (
    INVALID_EMAIL_MESSAGE,
    REQUIRED_FIELDS_MESSAGE,
    is_valid_email,
    missing_required_fields,
    validate_submission,
)
from portfolio_api.core.errors import ContactValidationError


class TestIsValidEmail:
    @pytest.mark.parametrize(
        "email",
        [
            "jane@x.com",
            "first.last@example.co.uk",
            "a+tag@sub.domain.io",
            "x@y.z",
        ],
    )
    def test_accepts_well_formed_addresses(self, email):
        assert is_valid_email(email) is True

    @pytest.mark.parametrize(
        "email",
        [
            "",
            "plainaddress",
            "jane@",
            "@x.com",
            "jane@x",
            "jane@@x.com",
            "ja ne@x.com",
            "jane@x .com",
            "jane@x.com\n",
            "jane@x.",
        ],
    )
    def test_rejects_malformed_addresses(self, email):
        assert is_valid_email(email) is False

    def test_rejects_non_string(self):
        assert is_valid_email(None) is False
        assert is_valid_email(42) is False


class TestMissingRequiredFields:
    def test_nothing_missing(self, valid_payload):
        assert missing_required_fields(valid_payload) == []

    def test_reports_absent_and_empty_fields(self):
        assert missing_required_fields({"name": "", "email": "jane@x.com"}) == [
            "name",
            "message",
        ]

    def test_non_string_values_count_as_missing(self):
        payload = {"name": 123, "email": ["jane@x.com"], "message": None}
        assert missing_required_fields(payload) == ["name", "email", "message"]

    def test_subject_is_never_required(self, valid_payload):
        assert "subject" not in valid_payload
        assert missing_required_fields(valid_payload) == []


class TestValidateSubmission:
    def test_returns_submission(self, valid_payload):
        result = validate_submission(valid_payload)

        assert isinstance(result, ContactSubmission)
        assert result.name == "Jane"
        assert result.email == "jane@x.com"
        assert result.message == "Hi"
        assert result.subject is None

    def test_keeps_subject(self, valid_payload):
        result = validate_submission({**valid_payload, "subject": "Hello"})
        assert result.subject == "Hello"

    def test_empty_or_non_text_subject_is_dropped(self, valid_payload):
        assert validate_submission({**valid_payload, "subject": ""}).subject is None
        assert validate_submission({**valid_payload, "subject": 7}).subject is None

    def test_extra_fields_are_ignored(self, valid_payload):
        result = validate_submission({**valid_payload, "phone": "555-0100"})
        assert not hasattr(result, "phone")

    @pytest.mark.parametrize("missing", ["name", "email", "message"])
    def test_missing_required_field_raises_400(self, valid_payload, missing):
        payload = {k: v for k, v in valid_payload.items() if k != missing}

        with pytest.raises(ContactValidationError) as exc_info:
            validate_submission(payload)

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == REQUIRED_FIELDS_MESSAGE

    def test_malformed_email_raises_400(self, valid_payload):
        with pytest.raises(ContactValidationError) as exc_info:
            validate_submission({**valid_payload, "email": "not-an-email"})

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == INVALID_EMAIL_MESSAGE

    def test_missing_fields_checked_before_email_format(self):
        with pytest.raises(ContactValidationError) as exc_info:
            validate_submission({"name": "Jane", "email": "bad"})

        assert exc_info.value.detail == REQUIRED_FIELDS_MESSAGE

    @pytest.mark.parametrize("payload", [None, [], "text", 12, ["name"]])
    def test_non_object_body_raises_400(self, payload):
        with pytest.raises(ContactValidationError) as exc_info:
            validate_submission(payload)

        assert exc_info.value.detail == REQUIRED_FIELDS_MESSAGE

    def test_validation_error_is_http_exception(self):
        assert issubclass(ContactValidationError, HTTPException)

    def test_submission_is_immutable(self, valid_payload):
        result = validate_submission(valid_payload)

        with pytest.raises(Exception):
            result.name = "Mallory"
