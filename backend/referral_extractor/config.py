"""
Configuration settings for the Referral Field Extraction Service
"""
import os
import tempfile
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}")


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if parsed <= 0:
        raise ValueError(f"{name} must be positive, got {parsed}")
    return parsed


class Settings:
    def __init__(self):
        # OpenAI - leaving the key unset switches field extraction to pattern matching
        self.OPENAI_API_KEY = os.getenv("OPENAI_API_KEY") or None
        self.OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")
        self.OPENAI_TEMPERATURE = _get_float("OPENAI_TEMPERATURE", 0.2)
        self.OPENAI_TIMEOUT = _get_float("OPENAI_TIMEOUT", 60.0)

        # OCR
        self.OCR_DPI = _get_int("OCR_DPI", 300)
        self.OCR_LANG = os.getenv("OCR_LANG", "eng")
        self.MAX_PDF_PAGES = _get_int("MAX_PDF_PAGES", 100)

        # File storage
        self.UPLOAD_DIR = os.getenv(
            "UPLOAD_DIR", os.path.join(tempfile.gettempdir(), "referral-uploads")
        )

        # Service
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.CORS_ORIGINS = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
            if origin.strip()
        ]

        # Ensure upload directory exists
        os.makedirs(self.UPLOAD_DIR, exist_ok=True)

    @property
    def ai_configured(self) -> bool:
        return bool(self.OPENAI_API_KEY)


settings = Settings()
