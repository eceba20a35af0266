"""
Pydantic models for the referral extraction results
"""
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict

NOT_FOUND = "Not found"

FIELD_NAMES = (
    "patient_name",
    "date_of_birth",
    "phone_number",
    "email_address",
    "insurance",
    "referring_provider",
    "referral_reason",
    "notes_comments",
)

CONFIDENCE_LEVELS = ("high", "medium", "low")


def is_found(value: Any) -> bool:
    """True when a field holds a real value rather than blank or the sentinel."""
    if value is None:
        return False
    text = str(value).strip()
    return text != "" and text != NOT_FOUND


def _normalize_value(name: str, value: Any) -> str:
    if value is None:
        return NOT_FOUND
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ValueError(f"Field {name} has unsupported type {type(value).__name__}")
    text = str(value).strip()
    if not text or text.lower() == NOT_FOUND.lower():
        return NOT_FOUND
    return text


class FieldSet(BaseModel):
    """Structured fields for one referral document"""
    model_config = ConfigDict(frozen=True)

    patient_name: str = NOT_FOUND
    date_of_birth: str = NOT_FOUND
    phone_number: str = NOT_FOUND
    email_address: str = NOT_FOUND
    insurance: str = NOT_FOUND
    referring_provider: str = NOT_FOUND
    referral_reason: str = NOT_FOUND
    notes_comments: str = NOT_FOUND
    confidence: Literal["high", "medium", "low"] = "low"
    extraction_notes: str = ""
    ai_used: bool = False

    @classmethod
    def from_model_output(cls, data: Any) -> "FieldSet":
        """
        Build a FieldSet from the parsed JSON returned by the model.

        Raises ValueError when the payload does not follow the expected schema.
        Keys outside the field schema are dropped.
        """
        if not isinstance(data, dict):
            raise ValueError("Model response is not a JSON object")

        missing = [name for name in FIELD_NAMES if name not in data]
        if missing:
            raise ValueError(f"Model response missing fields: {', '.join(missing)}")

        values = {name: _normalize_value(name, data[name]) for name in FIELD_NAMES}

        confidence = str(data.get("confidence", "")).strip().lower()
        if confidence not in CONFIDENCE_LEVELS:
            raise ValueError(f"Model response has invalid confidence: {data.get('confidence')!r}")

        notes = data.get("extraction_notes")
        if notes is None:
            notes = ""
        elif not isinstance(notes, str):
            raise ValueError("Model response extraction_notes is not a string")

        return cls(
            **values,
            confidence=confidence,
            extraction_notes=notes.strip(),
            ai_used=True,
        )

    def field_values(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in FIELD_NAMES}

    def missing_fields(self) -> List[str]:
        return [name for name in FIELD_NAMES if not is_found(getattr(self, name))]

    def found_fields(self) -> List[str]:
        return [name for name in FIELD_NAMES if is_found(getattr(self, name))]


class ExtractionResult(BaseModel):
    """Response model for a processed referral upload"""
    extracted_text: str
    file_name: str
    file_type: str
    fields: FieldSet
