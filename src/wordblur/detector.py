"""Per-frame word detection (ANALYZE stage)."""

import os
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
import cv2
import numpy as np
from tqdm import tqdm

from wordblur.geometry import Rect
from wordblur.ocr import OcrEngine


OcrFactory = Callable[[], OcrEngine]


@dataclass(frozen=True)
class AnalyzedFrame:
    """Detection result for one frame file."""

    path: str
    filename: str = ""
    regions: Tuple[Rect, ...] = ()
    error: Optional[str] = None

    def __post_init__(self):
        if not self.path:
            raise ValueError("AnalyzedFrame requires a source path")
        if not self.filename:
            object.__setattr__(self, "filename", os.path.basename(self.path))
        object.__setattr__(self, "regions", tuple(self.regions))


def load_image(image_path: str) -> np.ndarray:
    """Read a raster image as a BGR array. Raises ValueError if unreadable."""
    image = cv2.imread(str(image_path))
    if image is None:
        raise ValueError(f"Could not read image '{image_path}'")
    return image


def find_word_regions(
    image: np.ndarray, target_word: str, engine: OcrEngine
) -> List[Rect]:
    """
    Return boxes of all tokens whose text contains target_word.

    Matching is a case-sensitive substring test. Tokens with an empty box
    are skipped. Engine errors propagate.
    """
    regions = []
    for word in engine.detect(image):
        if target_word not in word.text:
            continue
        if word.width <= 0 or word.height <= 0:
            continue
        regions.append(Rect(word.x, word.y, word.width, word.height))
    return regions


def analyze_frame(
    image_path: str, target_word: str, ocr_factory: OcrFactory
) -> AnalyzedFrame:
    """
    Detect target_word in one frame image.

    A fresh OCR engine is created for every call. Any failure while loading
    the image or running OCR is reported and recorded on the returned frame,
    which then carries no regions.

    Args:
        image_path: Path to the frame image
        target_word: Non-empty, case-sensitive substring to look for
        ocr_factory: Zero-argument callable returning an OcrEngine

    Returns:
        AnalyzedFrame for image_path

    Raises:
        ValueError: If target_word is empty
    """
    if not target_word:
        raise ValueError("target_word must be a non-empty string")

    image_path = str(image_path)
    try:
        engine = ocr_factory()
        image = load_image(image_path)
        regions = find_word_regions(image, target_word, engine)
    except Exception as e:
        tqdm.write(f"Warning: OCR failed for '{image_path}': {e}")
        return AnalyzedFrame(path=image_path, error=str(e) or type(e).__name__)

    return AnalyzedFrame(path=image_path, regions=regions)


def detect_regions(
    image_path: str, target_word: str, ocr_factory: OcrFactory
) -> List[Rect]:
    """Return the regions of target_word in an image; OCR failures yield []."""
    return list(analyze_frame(image_path, target_word, ocr_factory).regions)
