import re
import json
import logging
from dataclasses import dataclass
from typing import Optional

from openai import OpenAI

from referral_extractor.models import FieldSet, NOT_FOUND
from referral_extractor.prompts import Field_Extraction_System_Prompt, build_user_prompt

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"
DEFAULT_TEMPERATURE = 0.2

FALLBACK_NOTES = (
    "Basic pattern matching used (no AI). Results may be incomplete. "
    "Configure OPENAI_API_KEY for better extraction."
)

# A label, up to 20 more characters on the same line, then a colon
FALLBACK_PATTERNS = {
    "patient_name": re.compile(
        r"\b(?:patient|name)\b[^:\n]{0,20}:[ \t]*([A-Za-z][A-Za-z ,.'\t-]*)", re.IGNORECASE),
    "date_of_birth": re.compile(
        r"\b(?:dob|date of birth|birth date)[^:\n]{0,20}:[ \t]*(\d{1,2}[-/]\d{1,2}[-/]\d{2,4})", re.IGNORECASE),
    "phone_number": re.compile(
        r"\b(?:phone|tel|telephone)[^:\n]{0,20}:[ \t]*(\+?\(?\d[\d \t().-]*\d)", re.IGNORECASE),
    "email_address": re.compile(
        r"([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})"),
    "insurance": re.compile(
        r"\b(?:insurance|carrier|plan)[^:\n]{0,20}:[ \t]*([A-Za-z0-9][A-Za-z0-9 ,.&'\t-]*)", re.IGNORECASE),
    "referring_provider": re.compile(
        r"\b(?:referring|provider|physician|doctor|dr\.)[^:\n]{0,20}:[ \t]*([A-Za-z][A-Za-z ,.'\t-]*)", re.IGNORECASE),
    "referral_reason": re.compile(
        r"\b(?:reason|diagnosis|complaint)[^:\n]{0,20}:[ \t]*([A-Za-z][A-Za-z0-9 ,.'()/\t-]*)", re.IGNORECASE),
    "notes_comments": re.compile(
        r"\b(?:notes|comments|remarks)\b[^:\n]{0,20}:[ \t]*([A-Za-z0-9][A-Za-z0-9 ,.;'()/&\t-]*)", re.IGNORECASE),
}


@dataclass(frozen=True)
class StrategyResult:
    """Outcome of one extraction attempt; exactly one of fields/error is set"""
    fields: Optional[FieldSet] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.fields is not None


class PatternStrategy:
    """Regex fallback. Always available, always low confidence."""

    def extract(self, text: str) -> FieldSet:
        values = {name: self.extract_pattern(pattern, text) for name, pattern in FALLBACK_PATTERNS.items()}
        return FieldSet(
            **values,
            confidence="low",
            extraction_notes=FALLBACK_NOTES,
            ai_used=False,
        )

    @staticmethod
    def extract_pattern(pattern: re.Pattern, text: str) -> str:
        match = pattern.search(text or "")
        if match is None:
            return NOT_FOUND
        return match.group(1).strip() or NOT_FOUND


class RemoteStrategy:
    """Field extraction through an OpenAI chat completion with a JSON response"""

    def __init__(self, client: OpenAI, model: str = DEFAULT_MODEL, temperature: float = DEFAULT_TEMPERATURE):
        self.client = client
        self.model = model
        self.temperature = temperature

    def chat(self, messages) -> Optional[str]:
        logger.info("Calling OpenAI model %s for field extraction.", self.model)
        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            response_format={"type": "json_object"},
        )
        logger.info("Received response from OpenAI model.")
        return response.choices[0].message.content

    def extract(self, text: str) -> StrategyResult:
        messages = [
            {"role": "system", "content": Field_Extraction_System_Prompt},
            {"role": "user", "content": build_user_prompt(text)},
        ]
        try:
            content = self.chat(messages)
            if content is None:
                return StrategyResult(error="Empty response from model")
            return StrategyResult(fields=FieldSet.from_model_output(json.loads(content)))
        except json.JSONDecodeError as e:
            return StrategyResult(error=f"Model response is not valid JSON: {e}")
        except Exception as e:
            return StrategyResult(error=str(e) or type(e).__name__)


class FieldExtractor:
    """
    Derives the referral fields from extracted document text.

    The OpenAI strategy is used when an API key was supplied and the caller asks
    for it; otherwise, or whenever that attempt fails, the regex strategy runs.
    """

    def __init__(self, api_key: Optional[str] = None, model: str = DEFAULT_MODEL,
                 temperature: float = DEFAULT_TEMPERATURE, timeout: Optional[float] = None,
                 client: Optional[OpenAI] = None):
        self.pattern_strategy = PatternStrategy()
        self.remote_strategy = None
        if api_key:
            if client is None:
                client_kwargs = {"api_key": api_key}
                if timeout is not None:
                    client_kwargs["timeout"] = timeout
                client = OpenAI(**client_kwargs)
            self.remote_strategy = RemoteStrategy(client, model=model, temperature=temperature)
            logger.info("OpenAI field extraction enabled (model %s)", model)
        else:
            logger.info("OPENAI_API_KEY not configured, using pattern matching only")

    @property
    def ai_available(self) -> bool:
        return self.remote_strategy is not None

    def extract_fields(self, text: str, use_remote: bool = True) -> FieldSet:
        if use_remote and self.ai_available:
            result = self.remote_strategy.extract(text)
            if result.ok:
                logger.info("AI extraction complete.")
                return result.fields
            logger.error("AI extraction failed: %s", result.error)

        logger.info("Using basic pattern matching for field extraction.")
        return self.pattern_strategy.extract(text)
