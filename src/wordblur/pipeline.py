"""Split -> analyze -> mask -> merge orchestration."""

import shutil
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from functools import partial
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple, Sequence, TypeVar

from tqdm import tqdm

from wordblur.config import MaskingConfig
from wordblur.detector import AnalyzedFrame, OcrFactory, analyze_frame
from wordblur.ffmpeg import FRAME_GLOB, FfmpegResult, merge_args, run_ffmpeg, split_args
from wordblur.masker import FfmpegRunner, MaskOutcome, mask_frame
from wordblur.ocr import RapidOcrEngine


T = TypeVar("T")
R = TypeVar("R")

STAGE_LABELS = {
    "prepare": "Prep",
    "split": "Split",
    "analyze": "Analyze",
    "mask": "Mask",
    "merge": "Merge",
}


class PipelineReport(NamedTuple):
    """Summary of one pipeline run."""

    total_frames: int
    frames_with_regions: int
    total_regions: int
    masked_frames: int
    copied_frames: int
    failed_detections: Dict[str, str]
    failed_masks: Dict[str, str]
    merge_returncode: int
    timings: Dict[str, float]

    @property
    def merged(self) -> bool:
        return self.merge_returncode == 0


def _fan_out(
    func: Callable[[T], R], items: Sequence[T], desc: str, max_workers: int | None
) -> List[R]:
    """
    Run func over items on a thread pool and wait for every task.

    Results keep the order of items. The first task exception cancels the
    tasks that have not started and is re-raised once running tasks finish.
    """
    results = [None] * len(items)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(func, item): idx for idx, item in enumerate(items)}
        try:
            with tqdm(
                total=len(items), desc=desc, unit="frame", mininterval=0.1
            ) as pbar:
                for future in as_completed(futures):
                    results[futures[future]] = future.result()
                    pbar.update(1)
        except BaseException:
            for future in futures:
                future.cancel()
            raise

    return results


def prepare_workspace(config: MaskingConfig):
    """Recreate both staging directories and remove a stale output video."""
    for directory in (config.input_frames_dir, config.output_frames_dir):
        if directory.exists():
            shutil.rmtree(directory)
        directory.mkdir(parents=True)

    if config.output_video_path.exists():
        config.output_video_path.unlink()


def split_video(config: MaskingConfig, runner: FfmpegRunner = run_ffmpeg) -> List[Path]:
    """
    Decompose the input video into numbered frames.

    Returns:
        Sorted list of extracted frame paths

    Raises:
        RuntimeError: If no frames were extracted
    """
    runner(
        split_args(config.input_video_path, config.input_frames_dir),
        check=config.strict_ffmpeg,
    )
    frame_paths = sorted(config.input_frames_dir.glob(FRAME_GLOB))
    if not frame_paths:
        raise RuntimeError(f"No frames extracted from '{config.input_video_path}'")
    return frame_paths


def analyze_frames(
    frame_paths: Sequence[Path],
    word: str,
    ocr_factory: OcrFactory,
    max_workers: int | None = None,
) -> List[AnalyzedFrame]:
    """Detect word in every frame concurrently. Returns once all are done."""
    return _fan_out(
        lambda path: analyze_frame(str(path), word, ocr_factory),
        frame_paths,
        "Analyzing",
        max_workers,
    )


def mask_frames(
    frames: Sequence[AnalyzedFrame],
    output_dir: Path,
    runner: FfmpegRunner = run_ffmpeg,
    passthrough: bool = False,
    check: bool = False,
    max_workers: int | None = None,
) -> List[MaskOutcome]:
    """Mask every analyzed frame concurrently. Returns once all are done."""
    return _fan_out(
        partial(
            mask_frame,
            output_dir=output_dir,
            runner=runner,
            passthrough=passthrough,
            check=check,
        ),
        frames,
        "Masking",
        max_workers,
    )


def merge_frames(
    config: MaskingConfig, runner: FfmpegRunner = run_ffmpeg
) -> FfmpegResult:
    """Reassemble the output frames into the output video."""
    return runner(
        merge_args(
            config.output_frames_dir,
            config.output_video_path,
            config.output_frame_rate,
        ),
        check=config.strict_ffmpeg,
    )


def run_pipeline(
    config: MaskingConfig,
    ocr_factory: OcrFactory | None = None,
    runner: FfmpegRunner = run_ffmpeg,
) -> PipelineReport:
    """
    Run all stages for one video.

    Each stage starts only after the previous one has fully completed.

    Args:
        config: Run configuration
        ocr_factory: Creates one OCR engine per frame (default: RapidOcrEngine)
        runner: Callable executing ffmpeg arguments

    Returns:
        PipelineReport with per-frame statistics and stage timings
    """
    if ocr_factory is None:
        ocr_factory = partial(
            RapidOcrEngine,
            config_path=config.ocr_config_path,
            det_limit_side_len=config.det_limit_side_len,
        )

    timings = {}

    stage_start = time.time()
    prepare_workspace(config)
    timings["prepare"] = time.time() - stage_start

    stage_start = time.time()
    print("Splitting video into frames...")
    frame_paths = split_video(config, runner)
    timings["split"] = time.time() - stage_start

    stage_start = time.time()
    print(f"Analyzing {len(frame_paths)} frames for '{config.word_to_mask}'...")
    frames = analyze_frames(
        frame_paths, config.word_to_mask, ocr_factory, config.max_workers
    )
    timings["analyze"] = time.time() - stage_start

    stage_start = time.time()
    print("Masking frames...")
    outcomes = mask_frames(
        frames,
        config.output_frames_dir,
        runner=runner,
        passthrough=config.passthrough_unmasked,
        check=config.strict_ffmpeg,
        max_workers=config.max_workers,
    )
    timings["mask"] = time.time() - stage_start

    written = sum(1 for o in outcomes if o.masked or o.copied)
    if written < len(frames):
        print(
            f"Warning: {len(frames) - written} of {len(frames)} frames were not "
            "written; the merged video stops at the first missing frame"
        )

    stage_start = time.time()
    print("Merging frames...")
    merge_result = merge_frames(config, runner)
    timings["merge"] = time.time() - stage_start

    return PipelineReport(
        total_frames=len(frames),
        frames_with_regions=sum(1 for f in frames if f.regions),
        total_regions=sum(len(f.regions) for f in frames),
        masked_frames=sum(1 for o in outcomes if o.masked),
        copied_frames=sum(1 for o in outcomes if o.copied),
        failed_detections={f.filename: f.error for f in frames if f.error},
        failed_masks={o.filename: o.error for o in outcomes if o.error},
        merge_returncode=merge_result.returncode,
        timings=timings,
    )


def print_summary(report: PipelineReport):
    """Print frame statistics, skipped frames and stage timings."""
    print("\nDone!")
    print(
        f"Found {report.total_regions} occurrences in "
        f"{report.frames_with_regions}/{report.total_frames} frames"
    )
    print(
        f"Masked {report.masked_frames} frames, "
        f"copied {report.copied_frames} unmasked frames"
    )

    if report.failed_detections:
        print(f"Skipped {len(report.failed_detections)} frames after OCR failures:")
        for filename, error in sorted(report.failed_detections.items()):
            print(f"  {filename}: {error}")

    if report.failed_masks:
        print(f"Failed to mask {len(report.failed_masks)} frames:")
        for filename, error in sorted(report.failed_masks.items()):
            print(f"  {filename}: {error}")

    if not report.merged:
        print(f"Merging failed: ffmpeg exited with status {report.merge_returncode}")

    print("-" * 55)
    for stage, label in STAGE_LABELS.items():
        if stage in report.timings:
            print(f"{label}:\t{report.timings[stage]:.2f}s")
    print("-" * 55)
