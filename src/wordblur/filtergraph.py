"""Compile detected regions into an ffmpeg blur-and-overlay filter graph.

For N regions the graph is::

    split=N[blur_0]...[blur_{N-1}];
    [blur_i]boxblur=5:1[cropped_i];
    [cropped_i]crop=W+10:H+10:X:Y[blurred_i];
    [0:v][blurred_0]overlay=X:Y[bg_0];
    [bg_{i-1}][blurred_i]overlay=X:Y[bg_i];
    ...

The last overlay has no output label so it feeds the output file.
"""

import shlex
from typing import List, NamedTuple, Sequence, Tuple

from wordblur.geometry import Rect


BLUR_STRENGTH = "5:1"  # boxblur luma_radius:luma_power
CROP_MARGIN = 10
SOURCE_LABEL = "0:v"


class FilterStage(NamedTuple):
    """One filter in a filter_complex chain with its input and output pads."""

    inputs: Tuple[str, ...]
    name: str
    args: str
    outputs: Tuple[str, ...]

    def render(self) -> str:
        pads_in = "".join(f"[{label}]" for label in self.inputs)
        pads_out = "".join(f"[{label}]" for label in self.outputs)
        return f"{pads_in}{self.name}={self.args}{pads_out}"


def build_filter_graph(regions: Sequence[Rect]) -> List[FilterStage]:
    """
    Build the filter stages that blur each region and overlay it back.

    Args:
        regions: Non-empty ordered sequence of regions

    Returns:
        Stages in emission order: split, blur/crop per region, overlay chain

    Raises:
        ValueError: If regions is empty
    """
    if not regions:
        raise ValueError("Cannot build a filter graph without regions")

    count = len(regions)
    stages = [
        FilterStage((), "split", str(count), tuple(f"blur_{i}" for i in range(count)))
    ]

    for i, rect in enumerate(regions):
        stages.append(
            FilterStage((f"blur_{i}",), "boxblur", BLUR_STRENGTH, (f"cropped_{i}",))
        )
        crop = (
            f"{rect.width + CROP_MARGIN}:{rect.height + CROP_MARGIN}"
            f":{rect.x1}:{rect.y1}"
        )
        stages.append(
            FilterStage((f"cropped_{i}",), "crop", crop, (f"blurred_{i}",))
        )

    background = SOURCE_LABEL
    for i, rect in enumerate(regions):
        outputs = (f"bg_{i}",) if i < count - 1 else ()
        stages.append(
            FilterStage(
                (background, f"blurred_{i}"), "overlay", f"{rect.x1}:{rect.y1}", outputs
            )
        )
        background = f"bg_{i}"

    return stages


def serialize_filter_graph(stages: Sequence[FilterStage]) -> str:
    """Render stages as a filter_complex string."""
    return ";".join(stage.render() for stage in stages)


def build_mask_args(
    regions: Sequence[Rect], input_path: str, output_path: str
) -> List[str]:
    """Return the ffmpeg arguments that write a blurred copy of input_path."""
    graph = serialize_filter_graph(build_filter_graph(regions))
    return [
        "-hide_banner",
        "-loglevel",
        "error",
        "-y",
        "-i",
        str(input_path),
        "-filter_complex",
        graph,
        str(output_path),
    ]


def compile_mask_command(
    regions: Sequence[Rect], input_path: str, output_path: str
) -> str:
    """Return the ffmpeg argument string for masking one frame."""
    return shlex.join(build_mask_args(regions, input_path, output_path))
