"""
Tests for validation functions.

Run with: pytest tests/test_validation.py -v
"""
import base64
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.errors import ValidationError
from core.validation import (
    MISSING_FIELDS_MSG,
    MISSING_WITHDRAWAL_MSG,
    build_field_set,
    decode_pdf_data_uri,
    ensure_pdf,
    parse_requester_fields,
    validate_sign_request,
)
from models.field_set import today_string
from schemas.signing import SignRequest


def make_request(**overrides) -> SignRequest:
    data = {"fullName": "Jane Doe", "email": "j@x.com", "location": "Berlin"}
    data.update(overrides)
    return SignRequest.model_validate(data)


class TestRequiredFields:
    """Tests for the fullName / email / location check."""

    def test_complete_request(self):
        """All fields present should not raise."""
        validate_sign_request(make_request())

    @pytest.mark.parametrize("field", ["fullName", "email", "location"])
    def test_missing_field(self, field):
        with pytest.raises(ValidationError) as exc:
            validate_sign_request(make_request(**{field: None}))
        assert str(exc.value) == MISSING_FIELDS_MSG

    def test_blank_field(self):
        """Whitespace only counts as missing."""
        with pytest.raises(ValidationError):
            validate_sign_request(make_request(location="   "))

    def test_contract_signature_required_when_asked(self):
        with pytest.raises(ValidationError) as exc:
            validate_sign_request(make_request(), require_contract_signature=True)
        assert str(exc.value) == MISSING_FIELDS_MSG

    def test_typed_contract_signature_satisfies(self):
        req = make_request(contractKeyboardSignature={"text": "Jane", "font": "DancingScript-Regular"})
        validate_sign_request(req, require_contract_signature=True)

    def test_blank_typed_contract_signature_does_not_satisfy(self):
        req = make_request(contractKeyboardSignature={"text": "  "})
        with pytest.raises(ValidationError):
            validate_sign_request(req, require_contract_signature=True)


class TestWithdrawal:
    """Tests for the withdrawal waiver signature check."""

    def test_not_accepted_needs_nothing(self):
        validate_sign_request(make_request(withdrawalAccepted=False))

    def test_accepted_without_signature(self):
        with pytest.raises(ValidationError) as exc:
            validate_sign_request(make_request(withdrawalAccepted=True))
        assert str(exc.value) == MISSING_WITHDRAWAL_MSG

    def test_accepted_with_drawn_signature(self, signature_uri):
        validate_sign_request(make_request(withdrawalAccepted=True, withdrawalSignature=signature_uri))

    def test_accepted_with_typed_signature(self):
        req = make_request(withdrawalAccepted=True, withdrawalKeyboardSignature={"text": "J. Doe"})
        validate_sign_request(req)

    def test_fields_checked_first(self):
        """A missing name is reported before the withdrawal problem."""
        with pytest.raises(ValidationError) as exc:
            validate_sign_request(make_request(fullName="", withdrawalAccepted=True))
        assert str(exc.value) == MISSING_FIELDS_MSG


class TestBuildFieldSet:
    def test_values_are_trimmed(self):
        fs = build_field_set(make_request(fullName="  Jane Doe ", date="01.02.2026"))
        assert fs.full_name == "Jane Doe"
        assert fs.date == "01.02.2026"

    def test_date_defaults_to_today(self):
        fs = build_field_set(make_request(), timezone="Europe/Berlin")
        assert fs.date == today_string("Europe/Berlin")

    def test_today_string_format(self):
        now = datetime(2026, 3, 7, 23, 30, tzinfo=ZoneInfo("Europe/Berlin"))
        assert today_string("Europe/Berlin", now=now) == "07.03.2026"


class TestParseRequesterFields:
    def test_query_parameters_copied(self):
        fields = parse_requester_fields("https://hook.example.test/x?vorname=Anna&card_id=42&email=a%40b.de")
        assert fields.vorname == "Anna"
        assert fields.card_id == "42"
        assert fields.email == "a@b.de"

    def test_missing_parameters_stay_none(self):
        fields = parse_requester_fields("https://hook.example.test/x?vorname=Anna")
        assert fields.card_id is None
        assert fields.email is None

    def test_no_url(self):
        fields = parse_requester_fields(None)
        assert fields.vorname is None

    def test_not_a_url(self):
        with pytest.raises(ValidationError):
            parse_requester_fields("just text")


class TestPdfPayloads:
    def test_ensure_pdf_accepts_header(self, template_pdf):
        ensure_pdf(template_pdf)

    def test_ensure_pdf_rejects_other_bytes(self):
        with pytest.raises(ValidationError):
            ensure_pdf(b"GIF89a....")

    def test_ensure_pdf_rejects_empty(self):
        with pytest.raises(ValidationError):
            ensure_pdf(b"")

    def test_decode_data_uri(self, template_pdf):
        uri = "data:application/pdf;base64," + base64.b64encode(template_pdf).decode()
        assert decode_pdf_data_uri(uri) == template_pdf

    def test_decode_bare_base64(self, template_pdf):
        assert decode_pdf_data_uri(base64.b64encode(template_pdf).decode()) == template_pdf

    def test_decode_rejects_garbage(self):
        with pytest.raises(ValidationError):
            decode_pdf_data_uri("data:application/pdf;base64,@@not-base64@@")

    def test_decode_rejects_non_pdf(self):
        with pytest.raises(ValidationError):
            decode_pdf_data_uri(base64.b64encode(b"hello world").decode())
