"""Recognition pipeline: bytes in, text and confidence out."""

from dataclasses import dataclass

import pytesseract

from fleetops.utils.config import AppConfig
from fleetops.utils.logger import get_logger

from .loader import DocumentLoadError, load_pages
from .preprocess import ScanPreprocessor
from .tesseract_engine import PageText, TesseractEngine

logger = get_logger(__name__)

PAGE_SEPARATOR = "\n\n"


class RecognitionError(Exception):
    """Recognition could not produce text for the document."""


@dataclass
class RecognitionResult:
    """Combined text for all pages and the mean page confidence."""

    text: str
    confidence: float
    page_count: int


class OrderRecognizer:
    """Loads, cleans and recognises a scanned order document.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.preprocessor = ScanPreprocessor(config.preprocessing)
        self.engine = TesseractEngine(
            tesseract_cmd=config.ocr.tesseract_cmd,
            default_lang=config.ocr.default_lang,
            timeout=config.ocr.timeout_seconds,
        )

    def recognize(self, content: bytes) -> RecognitionResult:
        """Recognise every page of an uploaded document.

        Args:
            content: Raw image or PDF bytes.

        Returns:
            RecognitionResult with page texts joined by a blank line.

        Raises:
            RecognitionError: If the document cannot be loaded or Tesseract
                fails or times out on any page.
        """
        try:
            images = load_pages(content, dpi=self.config.ocr.pdf_dpi)
            pages: list[PageText] = [
                self.engine.extract_text(
                    self.preprocessor.process(image), psm=self.config.ocr.psm
                )
                for image in images
            ]
        except DocumentLoadError as exc:
            raise RecognitionError(str(exc)) from exc
        except (RuntimeError, pytesseract.TesseractError, OSError) as exc:
            raise RecognitionError(f"OCR failed: {exc}") from exc

        if not pages:
            raise RecognitionError("Document has no pages")

        text = PAGE_SEPARATOR.join(page.text.strip() for page in pages)
        confidence = sum(page.confidence for page in pages) / len(pages)
        logger.info(
            "Recognised %d page(s), confidence %.2f", len(pages), confidence
        )
        return RecognitionResult(
            text=text, confidence=confidence, page_count=len(pages)
        )
