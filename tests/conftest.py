"""Shared fakes for the OCR engine and the ffmpeg command line."""

import shutil
import threading
from pathlib import Path
from typing import Dict, List

import cv2
import numpy as np
import pytest

from wordblur.ffmpeg import FfmpegResult
from wordblur.ocr import OcrWord


def write_frame(path: Path, value: int = 0) -> Path:
    """Write a small solid-color PNG whose pixel value identifies the frame."""
    image = np.full((16, 16, 3), value, dtype=np.uint8)
    assert cv2.imwrite(str(path), image)
    return path


class FakeOcrEngine:
    """OCR engine returning canned tokens keyed by the frame's pixel value."""

    def __init__(self, words_by_value: Dict[int, List[OcrWord]]):
        self.words_by_value = words_by_value

    def detect(self, frame: np.ndarray) -> List[OcrWord]:
        return list(self.words_by_value.get(int(frame[0, 0, 0]), []))


class CountingOcrFactory:
    """Creates FakeOcrEngine instances and counts how many were created."""

    def __init__(self, words_by_value: Dict[int, List[OcrWord]]):
        self.words_by_value = words_by_value
        self.created = 0
        self._lock = threading.Lock()

    def __call__(self) -> FakeOcrEngine:
        with self._lock:
            self.created += 1
        return FakeOcrEngine(self.words_by_value)


class FakeFfmpeg:
    """
    Stands in for run_ffmpeg.

    Split writes frame_0001.png ... with pixel values 1..N, masking copies the
    input frame to the output path, merge writes a placeholder video file.
    """

    def __init__(
        self, frame_count: int = 3, mask_returncode: int = 0, merge_returncode: int = 0
    ):
        self.frame_count = frame_count
        self.mask_returncode = mask_returncode
        self.merge_returncode = merge_returncode
        self.calls: List[List[str]] = []
        self.checks: List[bool] = []
        self.on_mask = None
        self._lock = threading.Lock()

    def __call__(self, args, check=False) -> FfmpegResult:
        args = [str(arg) for arg in args]
        with self._lock:
            self.calls.append(args)
            self.checks.append(check)

        if "-filter_complex" in args:
            if self.on_mask is not None:
                self.on_mask(args)
            if self.mask_returncode != 0:
                return FfmpegResult(args, self.mask_returncode, "boom")
            shutil.copyfile(args[args.index("-i") + 1], args[-1])
        elif "-r" in args:
            if self.merge_returncode != 0:
                return FfmpegResult(args, self.merge_returncode, "merge failed")
            Path(args[-1]).write_bytes(b"merged")
        else:
            frames_dir = Path(args[-1]).parent
            for i in range(1, self.frame_count + 1):
                write_frame(frames_dir / f"frame_{i:04d}.png", i)

        return FfmpegResult(args, 0, "")

    def calls_of(self, kind: str) -> List[List[str]]:
        if kind == "mask":
            return [c for c in self.calls if "-filter_complex" in c]
        if kind == "merge":
            return [c for c in self.calls if "-filter_complex" not in c and "-r" in c]
        return [c for c in self.calls if "-filter_complex" not in c and "-r" not in c]


@pytest.fixture
def fake_ffmpeg():
    return FakeFfmpeg()
