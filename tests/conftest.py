"""
Shared fixtures for the referral extraction tests.
"""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest


SAMPLE_REFERRAL_TEXT = """REFERRAL FORM
Patient Name: Jane Doe
DOB: 04/12/1986
Phone: (555) 123-4567
Email: jane.doe@example.com
Primary Insurance: Blue Cross PPO
Secondary Insurance: None
Referring Provider: Dr. Alan Smith, MD
Reason for Referral: Chronic low back pain
Notes: patient prefers morning calls
"""


def make_completion(content):
    """Build an object shaped like an OpenAI chat completion response."""
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def sample_text():
    return SAMPLE_REFERRAL_TEXT


@pytest.fixture
def model_payload():
    return {
        "patient_name": "Jane Doe",
        "date_of_birth": "04/12/1986",
        "phone_number": "(555) 123-4567",
        "email_address": "jane.doe@example.com",
        "insurance": "Blue Cross PPO",
        "referring_provider": "Dr. Alan Smith, MD",
        "referral_reason": "Chronic low back pain",
        "notes_comments": "patient prefers morning calls",
        "confidence": "high",
        "extraction_notes": "Clear scan.",
    }


@pytest.fixture
def openai_client():
    """Mock OpenAI client; set .respond_with(...) before use."""
    client = MagicMock()

    def respond_with(payload):
        content = payload if isinstance(payload, str) or payload is None else json.dumps(payload)
        client.chat.completions.create.return_value = make_completion(content)

    client.respond_with = respond_with
    return client
