"""CLI entry point for wordblur video word masking tool."""

import sys
import os
import argparse
from pathlib import Path

from wordblur.config import (
    DEFAULT_FRAME_RATE,
    DEFAULT_INPUT_FRAMES_DIR,
    DEFAULT_OUTPUT_FRAMES_DIR,
    MaskingConfig,
)
from wordblur.ffmpeg import FfmpegError, check_ffmpeg_available
from wordblur.ocr import DEFAULT_DET_LIMIT_SIDE_LEN
from wordblur.pipeline import print_summary, run_pipeline


SUPPORTED_EXTENSIONS = (".mp4", ".mkv", ".avi", ".webm")

# Optional RapidOCR config shipped next to the project
DEFAULT_OCR_CONFIG = Path(__file__).parent.parent.parent / "config.yaml"


def validate_video_extension(path: str, label: str):
    """Validate file extension. Raises SystemExit on invalid."""
    ext = Path(path).suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        supported = ", ".join(SUPPORTED_EXTENSIONS)
        print(f"Error: unsupported {label} format '{ext}'. Supported: {supported}")
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Blur every on-screen occurrence of a word in a video.",
        epilog="""
wordblur splits the video into frames with ffmpeg, finds the word in each frame
with RapidOCR, blurs the matching regions and merges the frames back into a video.
        """.strip(),
    )
    parser.add_argument("input_video", help="Path to the input video file")
    parser.add_argument(
        "word", help="Word to blur (case-sensitive substring of recognized text)"
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Path to the output video file (default: <input_stem>_masked.<ext>)",
        default=None,
    )
    parser.add_argument(
        "-r",
        "--fps",
        type=int,
        default=DEFAULT_FRAME_RATE,
        help=f"Output frame rate (default: {DEFAULT_FRAME_RATE})",
    )
    parser.add_argument(
        "--input-frames-dir",
        default=DEFAULT_INPUT_FRAMES_DIR,
        help="Staging directory for extracted frames",
    )
    parser.add_argument(
        "--output-frames-dir",
        default=DEFAULT_OUTPUT_FRAMES_DIR,
        help="Staging directory for masked frames",
    )
    parser.add_argument(
        "-j",
        "--workers",
        type=int,
        default=None,
        help="Number of worker threads (default: executor default)",
    )
    parser.add_argument(
        "--no-passthrough",
        action="store_true",
        help="Do not copy frames without matches into the output",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Abort when an ffmpeg invocation fails",
    )
    parser.add_argument(
        "--ocr-config",
        default=None,
        help="Path to a RapidOCR config YAML file",
    )
    parser.add_argument(
        "--det-limit",
        type=int,
        default=DEFAULT_DET_LIMIT_SIDE_LEN,
        help=f"OCR detection resolution (default: {DEFAULT_DET_LIMIT_SIDE_LEN})",
    )
    return parser


def parse_args(argv=None) -> MaskingConfig:
    """Parse command line arguments into a MaskingConfig."""
    args = build_parser().parse_args(argv)

    if not os.path.isfile(args.input_video):
        print(f"Error: Input file '{args.input_video}' does not exist")
        sys.exit(1)

    validate_video_extension(args.input_video, "input")

    if args.output is None:
        input_file = Path(args.input_video)
        output_path = str(
            input_file.parent / f"{input_file.stem}_masked{input_file.suffix}"
        )
    else:
        output_path = args.output

    validate_video_extension(output_path, "output")

    ocr_config = args.ocr_config
    if ocr_config is None and DEFAULT_OCR_CONFIG.exists():
        ocr_config = str(DEFAULT_OCR_CONFIG)

    try:
        return MaskingConfig(
            input_video_path=args.input_video,
            output_video_path=output_path,
            word_to_mask=args.word,
            output_frame_rate=args.fps,
            input_frames_dir=args.input_frames_dir,
            output_frames_dir=args.output_frames_dir,
            max_workers=args.workers,
            passthrough_unmasked=not args.no_passthrough,
            strict_ffmpeg=args.strict,
            ocr_config_path=ocr_config,
            det_limit_side_len=args.det_limit,
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)


def main(argv=None):
    """Main entry point."""
    if not check_ffmpeg_available():
        print("Error: ffmpeg is not available. Please install ffmpeg.")
        sys.exit(1)

    config = parse_args(argv)

    if config.ocr_config_path:
        print(f"Using OCR config: {config.ocr_config_path}")

    try:
        report = run_pipeline(config)
    except (FfmpegError, RuntimeError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    print_summary(report)

    if not report.merged:
        print(f"Error: could not write output video '{config.output_video_path}'")
        sys.exit(1)

    print(f"Output saved to: {config.output_video_path}")


if __name__ == "__main__":
    main()
