import logging

from referral_extractor.FieldExtractor import FieldExtractor
from referral_extractor.TextExtractor import TextExtractor, is_error_text
from referral_extractor.models import ExtractionResult, FieldSet

logger = logging.getLogger(__name__)

NO_TEXT_NOTES = "No usable text could be extracted from the document. Check the extracted text for the cause."


class ReferralPipeline:
    """Runs text extraction then field extraction for one uploaded document"""

    def __init__(self, text_extractor: TextExtractor, field_extractor: FieldExtractor):
        self.text_extractor = text_extractor
        self.field_extractor = field_extractor

    def process(self, file_path: str, file_name: str, file_type: str, use_ai: bool = True) -> ExtractionResult:
        logger.info("Extracting text from %s", file_name)
        extracted_text = self.text_extractor.extract(file_path)

        # Error messages and blank pages are not document content
        if extracted_text.strip() and not is_error_text(extracted_text):
            fields = self.field_extractor.extract_fields(extracted_text, use_remote=use_ai)
        else:
            logger.warning("No usable text extracted from %s", file_name)
            fields = FieldSet(extraction_notes=NO_TEXT_NOTES)

        missing_fields = fields.missing_fields()
        if missing_fields:
            logger.info("Missing fields for %s: %s", file_name, missing_fields)
        logger.info(
            "Extraction complete for %s (ai_used=%s, confidence=%s)",
            file_name, fields.ai_used, fields.confidence,
        )

        return ExtractionResult(
            extracted_text=extracted_text,
            file_name=file_name,
            file_type=file_type,
            fields=fields,
        )
