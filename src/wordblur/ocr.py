"""OCR engine abstraction and implementations."""

from typing import Protocol, List, NamedTuple, Sequence
import numpy as np

from wordblur.geometry import Rect


# Shortest image side (px) the text detector scales up to before detection
# (RapidOCR limit_type "min")
DEFAULT_DET_LIMIT_SIDE_LEN = 960


class OcrWord(NamedTuple):
    """A recognized text token and its bounding box."""

    x: int
    y: int
    width: int
    height: int
    text: str


class OcrEngine(Protocol):
    """Protocol defining the OCR engine interface."""

    def detect(self, frame: np.ndarray) -> List[OcrWord]:
        """
        Detect text in a frame.

        Args:
            frame: BGR image frame from OpenCV

        Returns:
            Recognized tokens in the engine's native order
        """
        ...


class RapidOcrEngine:
    """OCR engine implementation using RapidOCR."""

    def __init__(
        self,
        config_path: str | None = None,
        det_limit_side_len: int = DEFAULT_DET_LIMIT_SIDE_LEN,
    ):
        """
        Initialize RapidOCR engine.

        Args:
            config_path: Optional path to RapidOCR config YAML file
            det_limit_side_len: Detection resolution passed to the text detector.
                With a config file, only a non-default value overrides it.
        """
        from rapidocr_onnxruntime import RapidOCR

        overrides = {}
        if not config_path or det_limit_side_len != DEFAULT_DET_LIMIT_SIDE_LEN:
            overrides["det_limit_side_len"] = det_limit_side_len

        if config_path:
            self.engine = RapidOCR(config_path=config_path, **overrides)
        else:
            self.engine = RapidOCR(**overrides)

    def detect(self, frame: np.ndarray) -> List[OcrWord]:
        """
        Detect words using RapidOCR.

        Args:
            frame: BGR image frame from OpenCV

        Returns:
            List of OcrWord tokens, one per whitespace-separated word
        """
        result, _ = self.engine(frame, return_word_box=True)

        if not result:
            return []

        words = []
        for detection in result:
            words.extend(split_line_into_words(detection))
        return words


def polygon_to_rect(points: Sequence[Sequence[float]]) -> Rect | None:
    """Axis-aligned box around a polygon, or None if it has no area."""
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    x_min = max(0, int(min(xs)))
    y_min = max(0, int(min(ys)))
    x_max = int(max(xs))
    y_max = int(max(ys))
    if x_max <= x_min or y_max <= y_min:
        return None
    return Rect.from_corners(x_min, y_min, x_max, y_max)


def split_line_into_words(detection: Sequence) -> List[OcrWord]:
    """
    Split one RapidOCR line result into word tokens.

    With return_word_box=True a line is
    [box, text, score, char_boxes, chars, char_scores]. Consecutive
    non-whitespace characters form a word whose box is the union of their
    boxes. Lines without usable character boxes become a single token.
    """
    line_points, text = detection[0], detection[1]
    char_boxes = detection[3] if len(detection) > 4 else None
    chars = detection[4] if len(detection) > 4 else None

    if not char_boxes or not chars or len(char_boxes) != len(chars):
        rect = polygon_to_rect(line_points)
        if rect is None:
            return []
        return [OcrWord(rect.x1, rect.y1, rect.width, rect.height, text)]

    words = []
    current_text = ""
    current_points = []
    for char, points in list(zip(chars, char_boxes)) + [(" ", None)]:
        if not char.strip():
            rect = polygon_to_rect(current_points) if current_points else None
            if rect is not None:
                words.append(
                    OcrWord(rect.x1, rect.y1, rect.width, rect.height, current_text)
                )
            current_text = ""
            current_points = []
            continue
        current_text += char
        current_points.extend(points)

    return words
