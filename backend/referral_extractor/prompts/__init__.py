from .field_extraction_prompt import (
    FIELDS_TO_EXTRACT,
    Field_Extraction_System_Prompt,
    Field_Extraction_User_Prompt,
    build_user_prompt,
)

__all__ = [
    "FIELDS_TO_EXTRACT",
    "Field_Extraction_System_Prompt",
    "Field_Extraction_User_Prompt",
    "build_user_prompt",
]
