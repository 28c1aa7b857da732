"""Scan cleanup ahead of recognition.

Phone photos and fax scans of rate confirmations arrive rotated, small,
noisy and tilted. Each step here is a plain function over a numpy image;
:class:`ScanPreprocessor` applies them in order according to config.
"""

import cv2
import numpy as np
from PIL import Image, ImageOps

from fleetops.utils.config import PreprocessingConfig
from fleetops.utils.logger import get_logger

logger = get_logger(__name__)


def apply_exif_orientation(image: Image.Image) -> Image.Image:
    """Rotate a PIL image upright according to its EXIF orientation tag."""
    return ImageOps.exif_transpose(image) or image


def upscale(image: np.ndarray, min_side: int = 1700) -> np.ndarray:
    """Enlarge an image so its longest side reaches ``min_side`` pixels.

    Args:
        image: Input image (BGR, RGB or grayscale).
        min_side: Target length of the longest side. Larger images are
            returned unchanged.

    Returns:
        The resized image, or the input when no resize was needed.
    """
    h, w = image.shape[:2]
    longest = max(h, w)
    if longest == 0 or longest >= min_side:
        return image
    scale = min_side / longest
    size = (round(w * scale), round(h * scale))
    logger.debug("Upscaling %dx%d by %.2f", w, h, scale)
    return cv2.resize(image, size, interpolation=cv2.INTER_CUBIC)


def to_gray(image: np.ndarray) -> np.ndarray:
    if len(image.shape) == 3:
        if image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_RGBA2GRAY)
        return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)
    return image


def denoise(image: np.ndarray, d: int = 9, sigma: int = 75) -> np.ndarray:
    """Bilateral filter: smooths speckle while keeping glyph edges."""
    return cv2.bilateralFilter(image, d, sigma, sigma)


def detect_skew_angle(image: np.ndarray) -> float:
    """Estimate the skew of a grayscale page in degrees.

    Uses the median angle of long Hough line segments found on the
    Canny edges. Returns 0.0 when no lines are found.
    """
    edges = cv2.Canny(image, 50, 150, apertureSize=3)
    lines = cv2.HoughLinesP(
        edges, 1, np.pi / 180, 100, minLineLength=100, maxLineGap=10
    )
    if lines is None:
        return 0.0
    angles = [
        np.arctan2(y2 - y1, x2 - x1) * 180 / np.pi for x1, y1, x2, y2 in lines[:, 0]
    ]
    # Vertical rules would otherwise dominate the median.
    angles = [a for a in angles if abs(a) < 45]
    if not angles:
        return 0.0
    return float(np.median(angles))


def deskew(image: np.ndarray, angle_threshold: float = 0.5) -> np.ndarray:
    angle = detect_skew_angle(image)
    if abs(angle) < angle_threshold:
        return image
    h, w = image.shape[:2]
    matrix = cv2.getRotationMatrix2D((w // 2, h // 2), angle, 1.0)
    logger.debug("Deskewing by %.2f degrees", angle)
    return cv2.warpAffine(
        image,
        matrix,
        (w, h),
        flags=cv2.INTER_CUBIC,
        borderMode=cv2.BORDER_REPLICATE,
    )


def binarize(image: np.ndarray) -> np.ndarray:
    """Otsu threshold to a 0/255 image."""
    _, binary = cv2.threshold(image, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    return binary


class ScanPreprocessor:
    """Configurable cleanup pipeline for one page image.

    Args:
        config: Preprocessing configuration controlling which steps run.
    """

    def __init__(self, config: PreprocessingConfig) -> None:
        self.config = config

    def process(self, image: np.ndarray) -> np.ndarray:
        """Return a grayscale, optionally cleaned copy of ``image``."""
        result = upscale(image, self.config.upscale_min_side)
        result = to_gray(result)

        if self.config.denoise_enabled:
            result = denoise(result)
        if self.config.deskew_enabled:
            result = deskew(result)
        if self.config.binarize_enabled:
            result = binarize(result)

        logger.debug("Preprocessed page to %dx%d", result.shape[1], result.shape[0])
        return result
