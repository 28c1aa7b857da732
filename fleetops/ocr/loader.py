"""Turn uploaded bytes into page images.

Images (PNG, JPEG, TIFF, including multi-frame TIFF) are opened with
Pillow; PDFs are rasterised page by page with pdf2image.
"""

import io

import numpy as np
from pdf2image import convert_from_bytes
from PIL import Image, ImageSequence, UnidentifiedImageError

from fleetops.utils.logger import get_logger

from .preprocess import apply_exif_orientation

logger = get_logger(__name__)

PDF_MAGIC = b"%PDF"


class DocumentLoadError(ValueError):
    """The uploaded content is not a readable image or PDF."""


def is_pdf(content: bytes) -> bool:
    return content[:4] == PDF_MAGIC


def _to_rgb_array(image: Image.Image) -> np.ndarray:
    image = apply_exif_orientation(image)
    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    return np.array(image)


def pdf_to_images(content: bytes, dpi: int = 300) -> list[np.ndarray]:
    """Rasterise every PDF page.

    Raises:
        DocumentLoadError: If poppler cannot convert the document.
    """
    try:
        pages = convert_from_bytes(content, dpi=dpi)
    except Exception as exc:
        raise DocumentLoadError(f"PDF conversion failed: {exc}") from exc
    logger.info("Converted PDF to %d images at %d DPI", len(pages), dpi)
    return [_to_rgb_array(page) for page in pages]


def load_pages(content: bytes, dpi: int = 300) -> list[np.ndarray]:
    """Load all pages of an uploaded document.

    Args:
        content: Raw file bytes.
        dpi: Rendering resolution for PDF input.

    Returns:
        Page images as numpy arrays (RGB or grayscale).

    Raises:
        DocumentLoadError: When the bytes are empty or not a supported format.
    """
    if not content:
        raise DocumentLoadError("Empty document")
    if is_pdf(content):
        return pdf_to_images(content, dpi=dpi)

    try:
        image = Image.open(io.BytesIO(content))
        pages = [_to_rgb_array(frame.copy()) for frame in ImageSequence.Iterator(image)]
    except (UnidentifiedImageError, OSError) as exc:
        raise DocumentLoadError(f"Unsupported image: {exc}") from exc

    logger.debug("Loaded %d image frame(s)", len(pages))
    return pages
