"""Crop the stopwatch window out of a frame and binarize it for OCR."""

from typing import Tuple

import numpy as np
from PIL import Image

# ITU-R BT.601 luma weights, in thousandths so the threshold test is exact
LUMA_WEIGHTS = np.array([299, 587, 114], dtype=np.int64)


def crop_center(image: Image.Image, size: Tuple[int, int] = (600, 200)) -> Image.Image:
    """
    Crop a fixed-size window centred on the frame.

    Args:
        image: Full sampled frame
        size: (width, height) of the window

    Raises:
        ValueError: If the frame is smaller than the window
    """
    width, height = image.size
    win_w, win_h = size
    if win_w <= 0 or win_h <= 0:
        raise ValueError(f"Invalid region size: {size}")
    if width < win_w or height < win_h:
        raise ValueError(f"Frame {width}x{height} is smaller than the {win_w}x{win_h} clock region")

    # Fractional centres are truncated toward the top-left
    left = int(width / 2 - win_w / 2)
    top = int(height / 2 - win_h / 2)
    return image.crop((left, top, left + win_w, top + win_h))


def binarize(image: Image.Image, threshold: int = 150) -> Image.Image:
    """Convert to luminance and threshold: >= threshold is white, the rest black."""
    if image.mode != 'RGB':
        image = image.convert('RGB')
    pixels = np.asarray(image, dtype=np.int64)
    gray_milli = pixels @ LUMA_WEIGHTS
    binary = np.where(gray_milli >= threshold * 1000, 255, 0).astype(np.uint8)
    return Image.fromarray(binary)


def isolate_region(
    image: Image.Image,
    size: Tuple[int, int] = (600, 200),
    threshold: int = 150
) -> Image.Image:
    """Crop the clock region and binarize it, ready for the OCR engine."""
    return binarize(crop_center(image, size), threshold)
