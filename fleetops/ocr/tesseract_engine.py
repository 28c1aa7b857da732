"""Tesseract wrapper returning page text and a normalised confidence.

Only the text and an average word confidence are needed downstream, so
word boxes are not kept.
"""

from dataclasses import dataclass

import numpy as np
import pytesseract
from PIL import Image

from fleetops.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class PageText:
    """Recognised text for one page."""

    text: str
    confidence: float
    word_count: int
    language: str


class TesseractEngine:
    """Thin wrapper around ``pytesseract`` with a per-call timeout.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language code.
        timeout: Seconds before a single Tesseract call is abandoned.
            ``0`` disables the limit.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        timeout: float = 30.0,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.timeout = timeout

    def extract_text(
        self,
        image: np.ndarray,
        lang: str | None = None,
        psm: int = 3,
    ) -> PageText:
        """Recognise the text of one preprocessed page.

        Args:
            image: Page image as a numpy array.
            lang: OCR language code. Defaults to the engine default.
            psm: Tesseract page segmentation mode.

        Returns:
            PageText with the raw text and mean word confidence in [0, 1].

        Raises:
            RuntimeError: When Tesseract exceeds the timeout.
            pytesseract.TesseractError: When Tesseract itself fails.
        """
        lang = lang or self.default_lang
        config = f"--psm {psm}"
        pil_image = Image.fromarray(image)

        text = pytesseract.image_to_string(
            pil_image, lang=lang, config=config, timeout=self.timeout
        )
        data = pytesseract.image_to_data(
            pil_image,
            lang=lang,
            config=config,
            output_type=pytesseract.Output.DICT,
            timeout=self.timeout,
        )

        scores = [
            float(conf)
            for conf, word in zip(data["conf"], data["text"])
            if float(conf) > 0 and str(word).strip()
        ]
        confidence = sum(scores) / len(scores) / 100.0 if scores else 0.0
        confidence = min(max(confidence, 0.0), 1.0)

        logger.info(
            "OCR extracted %d words with average confidence %.2f",
            len(scores),
            confidence,
        )
        return PageText(
            text=text,
            confidence=confidence,
            word_count=len(scores),
            language=lang,
        )
