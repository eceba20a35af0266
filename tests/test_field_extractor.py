"""
Tests for structured field extraction (OpenAI strategy and regex fallback).
"""

import json

import pytest

from referral_extractor.FieldExtractor import FALLBACK_NOTES, FieldExtractor, PatternStrategy, RemoteStrategy
from referral_extractor.models import FIELD_NAMES, NOT_FOUND
from referral_extractor.prompts import Field_Extraction_System_Prompt

RESULT_KEYS = set(FIELD_NAMES) | {"confidence", "extraction_notes", "ai_used"}


class TestStrategySelection:

    def test_no_api_key_always_uses_fallback(self, sample_text, openai_client):
        extractor = FieldExtractor(api_key=None, client=openai_client)

        fields = extractor.extract_fields(sample_text, use_remote=True)

        assert fields.ai_used is False
        assert fields.confidence == "low"
        assert not extractor.ai_available
        openai_client.chat.completions.create.assert_not_called()

    def test_empty_api_key_counts_as_missing(self, sample_text):
        extractor = FieldExtractor(api_key="")

        assert extractor.extract_fields(sample_text).ai_used is False

    def test_use_remote_false_skips_model(self, sample_text, openai_client, model_payload):
        openai_client.respond_with(model_payload)
        extractor = FieldExtractor(api_key="sk-test", client=openai_client)

        fields = extractor.extract_fields(sample_text, use_remote=False)

        assert fields.ai_used is False
        openai_client.chat.completions.create.assert_not_called()

    def test_model_result_is_used_when_available(self, sample_text, openai_client, model_payload):
        openai_client.respond_with(model_payload)
        extractor = FieldExtractor(api_key="sk-test", client=openai_client)

        fields = extractor.extract_fields(sample_text)

        assert fields.ai_used is True
        assert fields.confidence == "high"
        assert fields.referring_provider == "Dr. Alan Smith, MD"
        assert fields.extraction_notes == "Clear scan."

    @pytest.mark.parametrize("use_key", [True, False])
    def test_result_always_has_the_same_keys(self, sample_text, openai_client, model_payload, use_key):
        openai_client.respond_with(model_payload)
        extractor = FieldExtractor(api_key="sk-test" if use_key else None, client=openai_client)

        fields = extractor.extract_fields(sample_text)

        assert set(fields.model_dump().keys()) == RESULT_KEYS


class TestRemoteFallback:

    @pytest.fixture
    def extractor(self, openai_client):
        return FieldExtractor(api_key="sk-test", client=openai_client)

    def test_api_error_falls_back(self, extractor, openai_client, sample_text):
        openai_client.chat.completions.create.side_effect = RuntimeError("Connection error.")

        fields = extractor.extract_fields(sample_text)

        assert fields.ai_used is False
        assert fields.confidence == "low"
        assert fields.email_address == "jane.doe@example.com"

    def test_invalid_json_falls_back(self, extractor, openai_client, sample_text):
        openai_client.respond_with("Here is the data: {patient_name: Jane")

        fields = extractor.extract_fields(sample_text)

        assert fields.ai_used is False
        assert fields.extraction_notes == FALLBACK_NOTES

    def test_empty_response_falls_back(self, extractor, openai_client, sample_text):
        openai_client.respond_with(None)

        assert extractor.extract_fields(sample_text).ai_used is False

    def test_missing_field_falls_back(self, extractor, openai_client, sample_text, model_payload):
        del model_payload["insurance"]
        openai_client.respond_with(model_payload)

        assert extractor.extract_fields(sample_text).ai_used is False

    def test_unknown_confidence_falls_back(self, extractor, openai_client, sample_text, model_payload):
        model_payload["confidence"] = "certain"
        openai_client.respond_with(model_payload)

        assert extractor.extract_fields(sample_text).ai_used is False

    def test_non_object_response_falls_back(self, extractor, openai_client, sample_text):
        openai_client.respond_with(json.dumps(["Jane Doe"]))

        assert extractor.extract_fields(sample_text).ai_used is False


class TestRemoteStrategy:

    def test_request_shape(self, openai_client, model_payload):
        openai_client.respond_with(model_payload)
        strategy = RemoteStrategy(openai_client, model="gpt-4o", temperature=0.2)

        result = strategy.extract("Patient Name: Jane Doe")

        assert result.ok
        kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == 0.2
        assert kwargs["response_format"] == {"type": "json_object"}
        system, user = kwargs["messages"]
        assert system == {"role": "system", "content": Field_Extraction_System_Prompt}
        assert user["role"] == "user"
        assert "Patient Name: Jane Doe" in user["content"]
        assert "- Referring provider: Name of the referring doctor or provider" in user["content"]

    def test_failure_is_reported_not_raised(self, openai_client):
        openai_client.chat.completions.create.side_effect = TimeoutError("Request timed out.")

        result = RemoteStrategy(openai_client).extract("text")

        assert not result.ok
        assert result.fields is None
        assert result.error == "Request timed out."

    def test_extra_keys_are_dropped(self, openai_client, model_payload):
        model_payload["social_security_number"] = "123-45-6789"
        openai_client.respond_with(model_payload)

        result = RemoteStrategy(openai_client).extract("text")

        assert "social_security_number" not in result.fields.model_dump()

    def test_blank_and_null_values_become_sentinel(self, openai_client, model_payload):
        model_payload.update({"email_address": None, "notes_comments": "  ", "insurance": "not found"})
        openai_client.respond_with(model_payload)

        fields = RemoteStrategy(openai_client).extract("text").fields

        assert fields.email_address == NOT_FOUND
        assert fields.notes_comments == NOT_FOUND
        assert fields.insurance == NOT_FOUND

    def test_confidence_is_normalized(self, openai_client, model_payload):
        model_payload["confidence"] = " Medium "
        openai_client.respond_with(model_payload)

        assert RemoteStrategy(openai_client).extract("text").fields.confidence == "medium"


class TestPatternStrategy:

    def test_full_referral(self, sample_text):
        fields = PatternStrategy().extract(sample_text)

        assert fields.patient_name == "Jane Doe"
        assert fields.date_of_birth == "04/12/1986"
        assert fields.phone_number == "(555) 123-4567"
        assert fields.email_address == "jane.doe@example.com"
        assert fields.insurance == "Blue Cross PPO"
        assert fields.referring_provider == "Dr. Alan Smith, MD"
        assert fields.referral_reason == "Chronic low back pain"
        assert fields.notes_comments == "patient prefers morning calls"
        assert fields.confidence == "low"
        assert fields.ai_used is False
        assert fields.extraction_notes == FALLBACK_NOTES

    def test_notes_never_take_insurance_lines(self):
        text = "Notes: patient prefers morning calls\nSecondary Insurance: None\n"

        fields = PatternStrategy().extract(text)

        assert fields.notes_comments == "patient prefers morning calls"
        assert "Insurance" not in fields.notes_comments

    def test_notes_when_insurance_comes_first(self):
        text = "Secondary Insurance: None\nAuthorization: SELF PAY\nNotes: patient prefers morning calls"

        assert PatternStrategy().extract(text).notes_comments == "patient prefers morning calls"

    def test_missing_phone_is_sentinel(self):
        fields = PatternStrategy().extract("Patient Name: John Roe\nPhone: N/A\nNotes: call after lunch")

        assert fields.phone_number == NOT_FOUND

    def test_email_found_anywhere(self):
        text = "Please send the report to jane.doe@example.com. Thanks"

        assert PatternStrategy().extract(text).email_address == "jane.doe@example.com"

    def test_empty_text_gives_all_sentinels(self):
        fields = PatternStrategy().extract("")

        assert all(getattr(fields, name) == NOT_FOUND for name in FIELD_NAMES)
        assert fields.missing_fields() == list(FIELD_NAMES)

    def test_label_without_value_is_sentinel(self):
        fields = PatternStrategy().extract("Patient Name:   \nDOB: unknown")

        assert fields.patient_name == NOT_FOUND
        assert fields.date_of_birth == NOT_FOUND

    def test_telephone_label_with_dashes(self):
        text = "Telephone Number: 555-987-6543 ext"

        assert PatternStrategy().extract(text).phone_number == "555-987-6543"
