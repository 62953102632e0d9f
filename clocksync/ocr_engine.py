"""OCR engine for reading the stopwatch region using EasyOCR."""

import logging
import warnings
from typing import Iterable, Optional, Tuple

import numpy as np
from PIL import Image

from clocksync.config import CLOCK_ALLOWLIST
from clocksync.errors import OCRUnavailable
from clocksync.profiler import profiler

try:
    import easyocr
    import torch
    has_easyocr = True

    # Suppress PyTorch pin_memory warnings on MPS (Apple Silicon)
    warnings.filterwarnings('ignore', message='.*pin_memory.*', category=UserWarning)
    warnings.filterwarnings('ignore', message='.*not supported on MPS.*', category=UserWarning)
except ImportError:
    easyocr = None
    torch = None
    has_easyocr = False

logger = logging.getLogger(__name__)


def detect_gpu() -> bool:
    """Return True when CUDA or Apple MPS is available to torch."""
    if torch is None:
        return False
    if torch.cuda.is_available():
        logger.info("EasyOCR: Using CUDA (NVIDIA/ROCm GPU)")
        return True
    if hasattr(torch.backends, 'mps') and torch.backends.mps.is_available():
        logger.info("EasyOCR: Using MPS (Apple Silicon GPU)")
        return True
    logger.info("EasyOCR: Using CPU (No GPU detected)")
    return False


def clear_gpu_memory() -> None:
    """Release cached CUDA memory, if any."""
    if torch is None:
        return
    if torch.cuda.is_available():
        torch.cuda.empty_cache()


def _join_fragments(results: Iterable[Tuple], min_confidence: float = 0.0) -> str:
    """Join EasyOCR (bbox, text, confidence) fragments left to right."""
    kept = [
        (min(point[0] for point in bbox), text.strip())
        for bbox, text, confidence in results
        if confidence >= min_confidence and text.strip()
    ]
    kept.sort(key=lambda item: item[0])
    return ' '.join(text for _, text in kept)


class ClockReader:
    """Handle on an initialized OCR engine, restricted to clock characters.

    Create one with create_reader(), use it for every frame of both videos,
    then close() it. Not safe for concurrent recognize() calls.
    """

    def __init__(self, reader, allowlist: str = CLOCK_ALLOWLIST, min_confidence: float = 0.0):
        self._reader = reader
        self.allowlist = allowlist
        self.min_confidence = min_confidence

    @property
    def closed(self) -> bool:
        return self._reader is None

    def recognize(self, image: Image.Image) -> str:
        """Return the text recognized in `image` (empty string when nothing is read)."""
        if self._reader is None:
            raise RuntimeError("OCR reader has already been closed")
        with profiler.timed("ocr"):
            results = self._reader.readtext(
                np.asarray(image),
                allowlist=self.allowlist,
                decoder='greedy',
                paragraph=False
            )
        return _join_fragments(results, self.min_confidence)

    def close(self) -> None:
        if self._reader is None:
            return
        self._reader = None
        clear_gpu_memory()
        logger.info("OCR reader released")

    def __enter__(self) -> "ClockReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def create_reader(
    allowlist: str = CLOCK_ALLOWLIST,
    gpu: Optional[bool] = None,
    min_confidence: float = 0.0,
    quantize: bool = True
) -> ClockReader:
    """
    Initialize EasyOCR and wrap it in a ClockReader.

    Args:
        allowlist: Characters the recognizer may emit
        gpu: Use GPU acceleration (default: auto-detect)
        min_confidence: Fragments below this confidence are dropped
        quantize: Use dynamic quantization on CPU (default: True)

    Raises:
        OCRUnavailable: If EasyOCR is missing or fails to load on both GPU and CPU
    """
    if not has_easyocr:
        raise OCRUnavailable("easyocr is not installed. Please install it with: pip install easyocr")

    if gpu is None:
        gpu = detect_gpu()
    else:
        logger.info(f"EasyOCR: Using {'GPU' if gpu else 'CPU'} (Manual override)")

    with profiler.timed("ocr_init"):
        try:
            reader = easyocr.Reader(['en'], gpu=gpu, quantize=quantize, verbose=False)
        except Exception as e:
            if not gpu:
                raise OCRUnavailable(f"Failed to initialize EasyOCR: {e}") from e
            logger.warning(f"EasyOCR: GPU initialization failed ({e}), falling back to CPU")
            try:
                reader = easyocr.Reader(['en'], gpu=False, quantize=quantize, verbose=False)
            except Exception as e2:
                raise OCRUnavailable(f"Failed to initialize EasyOCR (CPU fallback also failed): {e2}") from e2

    return ClockReader(reader, allowlist=allowlist, min_confidence=min_confidence)
