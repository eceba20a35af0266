FIELDS_TO_EXTRACT = {
    "patient_name": "Full name of the patient",
    "date_of_birth": "Patient's date of birth (format: MM/DD/YYYY or any date format found)",
    "phone_number": "Patient's phone number",
    "email_address": "Patient's email address",
    "insurance": "Insurance provider or insurance information",
    "referring_provider": "Name of the referring doctor or provider",
    "referral_reason": "Reason for the referral or chief complaint",
    "notes_comments": "Any additional notes, comments, or special instructions",
}

Field_Extraction_System_Prompt = (
    """
    You are an expert medical document processing assistant. You extract patient information from referral documents, faxed forms and medical records that were digitized with OCR.

    Extraction strategy:
    • Read the ENTIRE document before deciding a field is missing. The same information can appear in several sections (headers, tables, forms, body text, signatures).
    • Extract partial information when that is all the document contains (e.g. only a first name).

    Field-specific instructions:
    • patient_name: "Patient Name", "Name", or the patient information section.
    • date_of_birth: "DOB", "Date of Birth", "Birth Date", "Born". Keep the date format found in the document.
    • phone_number: "Phone", "Tel", "Telephone", "Contact", or number patterns like (XXX) XXX-XXXX.
    • email_address: any email-shaped text (name@domain.com) anywhere in the document.
    • insurance: "Insurance", "Payer", "Coverage", "Plan", "Primary Insurance". Return the plan name (e.g. "SELF PAY", "Blue Cross").
    • referring_provider: "Referring Provider", "From Provider", "Sent by", or a signature with credentials (MD, DO, NP, PA, FNP-C). When the name appears more than once, use the clearest and most complete occurrence and check the signature block for the correct spelling.
    • referral_reason: "Reason for Referral", "Diagnosis", "Chief Complaint", ICD-10 codes. Return the main condition (e.g. "Chronic low back pain").
    • notes_comments: ONLY text under a heading explicitly labeled "Notes", "Comments", "Special Instructions" or "Remarks". Insurance lines, authorization lines, secondary insurance information or other field labels are NEVER notes, even when they sit in an "additional information" area. If there is no such section, return "Not found".

    Rules:
    • Text may be garbled by OCR. Correct common OCR errors when the intended value is clear: "l" vs "I", "0" vs "O", dropped letters.
    • Return "Not found" for a field only when the value is truly absent, redacted or illegible, never because it is hard to find.
    • Only extract the requested fields. Do not return any other patient information.
    • When you had to infer a value from poor quality text, say so in extraction_notes.

    Confidence:
    • "high": all or most fields found in clear, unambiguous text
    • "medium": some fields found, or text quality is moderate
    • "low": very few fields found, or text is heavily garbled

    Return a JSON object with exactly this structure:
    {
        "patient_name": "extracted value or Not found",
        "date_of_birth": "extracted value or Not found",
        "phone_number": "extracted value or Not found",
        "email_address": "extracted value or Not found",
        "insurance": "extracted value or Not found",
        "referring_provider": "extracted value or Not found",
        "referral_reason": "extracted value or Not found",
        "notes_comments": "extracted value or Not found",
        "confidence": "high/medium/low",
        "extraction_notes": "Brief note about OCR quality, ambiguity or extraction problems"
    }
    """
)

Field_Extraction_User_Prompt = (
    """
    Extract the following information from this medical referral document:

    {field_list}

    Instructions for this document:
    1. Provider names may contain OCR errors. Look for the name in headers, signatures and "From Provider" sections and use the clearest version.
    2. Notes/Comments come ONLY from an actual "Notes" or "Comments" section. Lines like "Secondary Insurance: None recorded" or "Authorization: SELF PAY" are NOT notes.
    3. Double-check spelling by finding each name in more than one place.

    Document text (may contain OCR errors):
    \"\"\"
    {document_text}
    \"\"\"

    Provide the extracted information in JSON format.
    """
)


def humanize(field_name: str) -> str:
    return field_name.replace("_", " ").capitalize()


def build_field_list() -> str:
    return "\n".join(
        f"- {humanize(name)}: {description}" for name, description in FIELDS_TO_EXTRACT.items()
    )


def build_user_prompt(document_text: str) -> str:
    return Field_Extraction_User_Prompt.format(
        field_list=build_field_list(),
        document_text=document_text,
    )
