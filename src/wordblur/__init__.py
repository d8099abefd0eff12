"""wordblur - Blur a word wherever it appears on screen in a video."""

from wordblur.geometry import Rect
from wordblur.ocr import OcrEngine, OcrWord, RapidOcrEngine
from wordblur.detector import AnalyzedFrame, analyze_frame, detect_regions
from wordblur.filtergraph import (
    FilterStage,
    build_filter_graph,
    build_mask_args,
    compile_mask_command,
    serialize_filter_graph,
)
from wordblur.ffmpeg import FfmpegError, FfmpegResult, run_ffmpeg
from wordblur.masker import MaskOutcome, mask_frame
from wordblur.config import MaskingConfig
from wordblur.pipeline import PipelineReport, run_pipeline

__all__ = [
    "Rect",
    "OcrEngine",
    "OcrWord",
    "RapidOcrEngine",
    "AnalyzedFrame",
    "analyze_frame",
    "detect_regions",
    "FilterStage",
    "build_filter_graph",
    "build_mask_args",
    "compile_mask_command",
    "serialize_filter_graph",
    "FfmpegError",
    "FfmpegResult",
    "run_ffmpeg",
    "MaskOutcome",
    "mask_frame",
    "MaskingConfig",
    "PipelineReport",
    "run_pipeline",
]
