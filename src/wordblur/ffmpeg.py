"""Thin wrapper around the ffmpeg command line."""

import subprocess
from pathlib import Path
from typing import List, NamedTuple, Sequence

from tqdm import tqdm


# Split output / merge input naming, e.g. frame_0001.png
FRAME_PATTERN = "frame_%04d.png"
FRAME_GLOB = "frame_*.png"

QUIET_ARGS = ["-hide_banner", "-loglevel", "error", "-y"]


class FfmpegResult(NamedTuple):
    """Outcome of one ffmpeg invocation."""

    args: List[str]
    returncode: int
    stderr: str


class FfmpegError(RuntimeError):
    """ffmpeg could not be started or exited with a non-zero status."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


def check_ffmpeg_available() -> bool:
    """Check if ffmpeg is available in PATH."""
    try:
        subprocess.run(
            ["ffmpeg", "-version"],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=True,
        )
        return True
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False


def run_ffmpeg(args: Sequence[str], check: bool = False) -> FfmpegResult:
    """
    Run ffmpeg with the given arguments and wait for it to exit.

    Args:
        args: Arguments passed after the ffmpeg executable
        check: Raise FfmpegError on a non-zero exit instead of warning

    Returns:
        FfmpegResult with the exit status and captured stderr

    Raises:
        FfmpegError: If ffmpeg is missing, or exits non-zero while check is set
    """
    args = [str(arg) for arg in args]
    try:
        completed = subprocess.run(
            ["ffmpeg", *args],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
        )
    except FileNotFoundError as e:
        raise FfmpegError("ffmpeg is not available. Please install ffmpeg.") from e

    result = FfmpegResult(args, completed.returncode, completed.stderr or "")
    if result.returncode != 0:
        message = f"ffmpeg exited with status {result.returncode}: {result.stderr.strip()[-500:]}"
        if check:
            raise FfmpegError(message, result.returncode, result.stderr)
        tqdm.write(f"Warning: {message}")
    return result


def split_args(input_video: Path, frames_dir: Path) -> List[str]:
    """Arguments that decompose a video into numbered PNG frames."""
    return [*QUIET_ARGS, "-i", str(input_video), str(Path(frames_dir) / FRAME_PATTERN)]


def merge_args(frames_dir: Path, output_video: Path, frame_rate: int) -> List[str]:
    """Arguments that reassemble numbered PNG frames into a video."""
    return [
        *QUIET_ARGS,
        "-r",
        str(frame_rate),
        "-i",
        str(Path(frames_dir) / FRAME_PATTERN),
        "-r",
        str(frame_rate),
        str(output_video),
    ]
