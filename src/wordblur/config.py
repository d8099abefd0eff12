"""Run configuration."""

from dataclasses import dataclass
from pathlib import Path

from wordblur.ocr import DEFAULT_DET_LIMIT_SIDE_LEN


DEFAULT_FRAME_RATE = 3
DEFAULT_INPUT_FRAMES_DIR = "input_frames"
DEFAULT_OUTPUT_FRAMES_DIR = "output_frames"


@dataclass(frozen=True)
class MaskingConfig:
    """Options for one masking run. Paths are coerced to Path."""

    input_video_path: Path
    output_video_path: Path
    word_to_mask: str
    output_frame_rate: int = DEFAULT_FRAME_RATE
    input_frames_dir: Path = Path(DEFAULT_INPUT_FRAMES_DIR)
    output_frames_dir: Path = Path(DEFAULT_OUTPUT_FRAMES_DIR)
    max_workers: int | None = None
    passthrough_unmasked: bool = True
    strict_ffmpeg: bool = False
    ocr_config_path: str | None = None
    det_limit_side_len: int = DEFAULT_DET_LIMIT_SIDE_LEN

    def __post_init__(self):
        for name in (
            "input_video_path",
            "output_video_path",
            "input_frames_dir",
            "output_frames_dir",
        ):
            object.__setattr__(self, name, Path(getattr(self, name)))

        if not self.word_to_mask:
            raise ValueError("word_to_mask must be a non-empty string")
        if self.output_frame_rate <= 0:
            raise ValueError(
                f"output_frame_rate must be positive, got {self.output_frame_rate}"
            )
        if self.max_workers is not None and self.max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {self.max_workers}")
        if self.det_limit_side_len <= 0:
            raise ValueError(
                f"det_limit_side_len must be positive, got {self.det_limit_side_len}"
            )
        if self.input_frames_dir.resolve() == self.output_frames_dir.resolve():
            raise ValueError("input and output frame directories must differ")
