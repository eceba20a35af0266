from fastapi import FastAPI, File, Form, UploadFile, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
import logging
import os
import tempfile
from typing import Optional

from referral_extractor.config import settings
from referral_extractor.FieldExtractor import FieldExtractor
from referral_extractor.TextExtractor import TextExtractor
from referral_extractor.models import ExtractionResult
from referral_extractor.pipeline import ReferralPipeline

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Referral Field Extraction Service")

# CORS middleware for NextJS frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

pipeline = ReferralPipeline(
    TextExtractor(
        dpi=settings.OCR_DPI,
        lang=settings.OCR_LANG,
        max_pages=settings.MAX_PDF_PAGES,
        scratch_dir=settings.UPLOAD_DIR,
    ),
    FieldExtractor(
        api_key=settings.OPENAI_API_KEY,
        model=settings.OPENAI_MODEL,
        temperature=settings.OPENAI_TEMPERATURE,
        timeout=settings.OPENAI_TIMEOUT,
    ),
)


def save_upload(file_content: bytes, filename: str) -> str:
    """Write the upload to a uniquely named temp file, keeping its extension"""
    suffix = os.path.splitext(filename)[1].lower()
    with tempfile.NamedTemporaryFile(
        delete=False, prefix="referral-", suffix=suffix, dir=settings.UPLOAD_DIR
    ) as temp_file:
        temp_file.write(file_content)
        return temp_file.name


@app.post("/extract", response_model=ExtractionResult)
async def extract_referral(file: Optional[UploadFile] = File(None), use_ai: bool = Form(True)):
    """
    Upload a referral document and extract its text and structured fields
    """
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="Please select a file to upload")

    temp_path = None
    try:
        file_content = await file.read()
        if not file_content:
            raise HTTPException(status_code=400, detail="Uploaded file is empty")

        logger.info("Processing document: %s", file.filename)
        temp_path = save_upload(file_content, file.filename)

        return await run_in_threadpool(
            pipeline.process,
            temp_path,
            file.filename,
            file.content_type or "",
            use_ai,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error("Unexpected error processing document: %s", str(e))
        raise HTTPException(status_code=500, detail=f"Error processing file: {str(e)}")
    finally:
        # Clean up temporary file
        if temp_path and os.path.exists(temp_path):
            os.remove(temp_path)


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "ai_configured": pipeline.field_extractor.ai_available,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
