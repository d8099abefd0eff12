"""Per-frame masking (MASK stage)."""

import shutil
from pathlib import Path
from typing import Callable, NamedTuple, Optional

from wordblur.detector import AnalyzedFrame
from wordblur.ffmpeg import FfmpegResult, run_ffmpeg
from wordblur.filtergraph import build_mask_args


FfmpegRunner = Callable[..., FfmpegResult]


class MaskOutcome(NamedTuple):
    """What happened to one frame during masking."""

    filename: str
    masked: bool
    copied: bool
    error: Optional[str] = None


def output_path_for(frame: AnalyzedFrame, output_dir: Path) -> Path:
    """Return where the masked copy of frame is written."""
    if not frame.path or not frame.filename:
        raise ValueError("Input/output frame path not provided while building blur command")
    return Path(output_dir) / frame.filename


def mask_frame(
    frame: AnalyzedFrame,
    output_dir: Path,
    runner: FfmpegRunner = run_ffmpeg,
    passthrough: bool = False,
    check: bool = False,
) -> MaskOutcome:
    """
    Blur the detected regions of one frame into output_dir.

    Frames without regions are skipped, or copied unchanged when passthrough
    is set.

    Args:
        frame: Analyzed frame to mask
        output_dir: Directory receiving the output frame
        runner: Callable executing ffmpeg arguments
        passthrough: Copy frames without regions to the output unchanged
        check: Raise on ffmpeg failures instead of reporting them

    Returns:
        MaskOutcome describing what was written

    Raises:
        ValueError: If the frame has no path or filename
        FfmpegError: If ffmpeg fails and check is set
    """
    output_path = output_path_for(frame, output_dir)

    if not frame.regions:
        if passthrough:
            shutil.copyfile(frame.path, output_path)
            return MaskOutcome(frame.filename, masked=False, copied=True)
        return MaskOutcome(frame.filename, masked=False, copied=False)

    args = build_mask_args(frame.regions, frame.path, str(output_path))
    result = runner(args, check=check)
    if result.returncode != 0:
        error = result.stderr.strip() or f"ffmpeg exited with status {result.returncode}"
        return MaskOutcome(frame.filename, masked=False, copied=False, error=error)

    return MaskOutcome(frame.filename, masked=True, copied=False)
