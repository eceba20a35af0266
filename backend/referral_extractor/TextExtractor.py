import os
import tempfile
import logging
from typing import List, Optional

import pytesseract
from PIL import Image, ImageSequence
from pypdf import PdfReader
from pdf2image import convert_from_path, pdfinfo_from_path

logger = logging.getLogger(__name__)

IMAGE_FORMATS = ['.jpg', '.jpeg', '.png', '.tiff', '.bmp']
PDF_FORMAT = '.pdf'

ERROR_PREFIX = "Error:"
UNSUPPORTED_PREFIX = "Unsupported file format:"


def page_marker(page_number: int) -> str:
    return f"\n\n=== PAGE {page_number} ===\n\n"


def is_error_text(text: str) -> bool:
    """True when extract() reported a failure instead of document content."""
    return text.startswith(ERROR_PREFIX) or text.startswith(UNSUPPORTED_PREFIX)


class TextExtractor:
    """
    Turns an uploaded referral document into plain text.

    Images go straight to Tesseract. PDFs are read through their text layer
    first; scanned PDFs without one are rasterized page by page and OCR'd.
    Failures come back as an "Error: ..." string instead of an exception.
    """

    def __init__(self, dpi: int = 300, lang: str = "eng", max_pages: int = 100,
                 scratch_dir: Optional[str] = None):
        self.dpi = dpi
        self.lang = lang
        self.max_pages = max_pages
        self.scratch_dir = scratch_dir

    def extract(self, file_path: str) -> str:
        """Extract text from the document, dispatching on its file extension"""
        file_ext = os.path.splitext(str(file_path))[1].lower()

        if file_ext == PDF_FORMAT:
            return self.extract_from_pdf(str(file_path))
        if file_ext in IMAGE_FORMATS:
            return self.extract_from_image(str(file_path))

        logger.warning("Unsupported file format: %s", file_ext or "(none)")
        return f"{UNSUPPORTED_PREFIX} {file_ext}"

    def ocr_frame(self, image: Image.Image) -> str:
        # Convert to RGB if necessary
        if image.mode != 'RGB':
            image = image.convert('RGB')
        return pytesseract.image_to_string(image, lang=self.lang)

    def ocr_image(self, image_path: str) -> str:
        with Image.open(image_path) as image:
            return self.ocr_frame(image)

    def extract_from_image(self, file_path: str) -> str:
        """Extract text from image using Tesseract OCR, one pass per frame"""
        try:
            with Image.open(file_path) as image:
                # Multi-page TIFF faxes carry one page per frame
                frame_texts = [self.ocr_frame(frame) for frame in ImageSequence.Iterator(image)]
        except Exception as e:
            logger.error("Error extracting from image: %s", str(e))
            return f"{ERROR_PREFIX} {e}"

        if len(frame_texts) == 1:
            return frame_texts[0]
        logger.info("OCR'd %d frames from %s", len(frame_texts), os.path.basename(file_path))
        return "".join(page_marker(number) + frame_text
                       for number, frame_text in enumerate(frame_texts, start=1))

    def extract_from_pdf(self, file_path: str) -> str:
        text = self.extract_text_layer(file_path)
        if text.strip():
            return text

        logger.info("No text layer found in PDF, falling back to OCR")
        return self.extract_with_ocr(file_path)

    def extract_text_layer(self, file_path: str) -> str:
        """Read the embedded text of every page; empty string if the PDF has none"""
        try:
            reader = PdfReader(file_path)
            pages = reader.pages
            total_pages = len(pages)
        except Exception as e:
            logger.error("Error extracting text from PDF: %s", str(e))
            return ""

        page_texts: List[str] = []
        for index in range(total_pages):
            try:
                page_texts.append(pages[index].extract_text() or "")
            except Exception as e:
                logger.error("Error reading text layer of page %d: %s", index + 1, str(e))
                page_texts.append("")

        # Scanned PDFs often carry an empty text layer
        if not any(page_text.strip() for page_text in page_texts):
            return ""

        if total_pages == 1:
            return page_texts[0]
        return "".join(page_marker(number) + page_text
                       for number, page_text in enumerate(page_texts, start=1))

    def extract_with_ocr(self, file_path: str) -> str:
        """Rasterize every page at the configured DPI and OCR it"""
        try:
            total_pages = int(pdfinfo_from_path(file_path)["Pages"])
        except Exception as e:
            logger.error("Error processing PDF pages: %s", str(e))
            return f"{ERROR_PREFIX} {e}"

        if total_pages > self.max_pages:
            logger.warning("PDF has %d pages. Limiting OCR to %d", total_pages, self.max_pages)
            total_pages = self.max_pages

        logger.info("Processing %d pages from PDF", total_pages)

        text = ""
        try:
            # Each extraction gets its own scratch directory
            with tempfile.TemporaryDirectory(prefix="referral-ocr-", dir=self.scratch_dir) as work_dir:
                for page_number in range(1, total_pages + 1):
                    logger.info("Extracting text from page %d/%d", page_number, total_pages)
                    page_text = self.ocr_pdf_page(file_path, page_number, work_dir)
                    if page_text is not None:
                        text += page_marker(page_number) + page_text
        except OSError as e:
            logger.error("Error preparing OCR scratch directory: %s", str(e))
            return f"{ERROR_PREFIX} {e}"

        return text

    def ocr_pdf_page(self, file_path: str, page_number: int, work_dir: str) -> Optional[str]:
        image_path = self.render_page(file_path, page_number, work_dir)
        if image_path is None:
            return None

        try:
            return self.ocr_image(image_path)
        except Exception as e:
            logger.error("OCR failed for page %d: %s", page_number, str(e))
            return None
        finally:
            if os.path.exists(image_path):
                os.remove(image_path)

    def render_page(self, file_path: str, page_number: int, work_dir: str) -> Optional[str]:
        """Render one page (1-indexed) to a PNG under work_dir, returning its path"""
        try:
            paths = convert_from_path(
                file_path,
                dpi=self.dpi,
                first_page=page_number,
                last_page=page_number,
                fmt="png",
                output_folder=work_dir,
                paths_only=True,
            )
        except Exception as e:
            logger.error("Error converting PDF page %d to image: %s", page_number, str(e))
            return None

        if not paths:
            logger.error("Failed to create image for page %d", page_number)
            return None

        return str(paths[0])
