"""Tests for filter graph compilation."""

import shlex

import pytest

from wordblur import Rect
from wordblur.filtergraph import (
    FilterStage,
    build_filter_graph,
    build_mask_args,
    compile_mask_command,
    serialize_filter_graph,
)


def test_single_region_graph():
    """One region: one branch, padded crop and a single unlabeled overlay."""
    graph = serialize_filter_graph(build_filter_graph([Rect(10, 20, 30, 15)]))

    assert graph == (
        "split=1[blur_0];"
        "[blur_0]boxblur=5:1[cropped_0];"
        "[cropped_0]crop=40:25:10:20[blurred_0];"
        "[0:v][blurred_0]overlay=10:20"
    )
    assert "bg_0" not in graph


def test_three_regions_chain_backgrounds():
    regions = [Rect(0, 0, 5, 5), Rect(10, 10, 20, 8), Rect(30, 40, 1, 1)]
    graph = serialize_filter_graph(build_filter_graph(regions))

    assert graph == (
        "split=3[blur_0][blur_1][blur_2];"
        "[blur_0]boxblur=5:1[cropped_0];"
        "[cropped_0]crop=15:15:0:0[blurred_0];"
        "[blur_1]boxblur=5:1[cropped_1];"
        "[cropped_1]crop=30:18:10:10[blurred_1];"
        "[blur_2]boxblur=5:1[cropped_2];"
        "[cropped_2]crop=11:11:30:40[blurred_2];"
        "[0:v][blurred_0]overlay=0:0[bg_0];"
        "[bg_0][blurred_1]overlay=10:10[bg_1];"
        "[bg_1][blurred_2]overlay=30:40"
    )


@pytest.mark.parametrize("count", [1, 2, 5, 12])
def test_stage_counts(count):
    regions = [Rect(i, 2 * i, 10 + i, 5 + i) for i in range(count)]
    stages = build_filter_graph(regions)

    by_name = {}
    for stage in stages:
        by_name.setdefault(stage.name, []).append(stage)

    assert len(by_name["split"]) == 1
    assert len(by_name["split"][0].outputs) == count
    assert len(by_name["boxblur"]) == count
    assert len(by_name["crop"]) == count
    assert len(by_name["overlay"]) == count

    for rect, crop in zip(regions, by_name["crop"]):
        assert crop.args == f"{rect.width + 10}:{rect.height + 10}:{rect.x1}:{rect.y1}"

    bg_labels = [label for s in by_name["overlay"] for label in s.outputs]
    assert bg_labels == [f"bg_{i}" for i in range(count - 1)]
    assert by_name["overlay"][-1].outputs == ()


@pytest.mark.parametrize("count", [1, 3, 7])
def test_graph_is_well_formed(count):
    """Every label is produced exactly once before it is consumed exactly once."""
    regions = [Rect(5, 5, 10, 10)] * count
    produced = set()
    consumed = set()

    for stage in build_filter_graph(regions):
        for label in stage.inputs:
            if label == "0:v":
                continue
            assert label in produced
            assert label not in consumed
            consumed.add(label)
        for label in stage.outputs:
            assert label not in produced
            produced.add(label)

    assert produced == consumed


def test_overlapping_regions_stay_independent():
    regions = [Rect(10, 10, 50, 20), Rect(20, 15, 50, 20)]
    graph = serialize_filter_graph(build_filter_graph(regions))

    assert "split=2[blur_0][blur_1]" in graph
    assert "[cropped_0]crop=60:30:10:10[blurred_0]" in graph
    assert "[cropped_1]crop=60:30:20:15[blurred_1]" in graph
    assert graph.endswith("[bg_0][blurred_1]overlay=20:15")


def test_empty_regions_rejected():
    with pytest.raises(ValueError):
        build_filter_graph([])


def test_compile_is_pure():
    regions = [Rect(1, 2, 3, 4), Rect(5, 6, 7, 8)]
    first = compile_mask_command(regions, "in/frame_0001.png", "out/frame_0001.png")
    second = compile_mask_command(
        list(regions), "in/frame_0001.png", "out/frame_0001.png"
    )
    assert first == second


def test_mask_args_layout():
    args = build_mask_args([Rect(10, 20, 30, 15)], "f.png", "o.png")

    assert args[args.index("-i") + 1] == "f.png"
    assert args[-1] == "o.png"
    graph = args[args.index("-filter_complex") + 1]
    assert graph.startswith("split=1[blur_0];")


def test_compile_mask_command_round_trips_through_shell_quoting():
    command = compile_mask_command([Rect(10, 20, 30, 15)], "f.png", "o.png")
    assert shlex.split(command) == build_mask_args([Rect(10, 20, 30, 15)], "f.png", "o.png")


def test_stage_render():
    stage = FilterStage(("a", "b"), "overlay", "1:2", ("c",))
    assert stage.render() == "[a][b]overlay=1:2[c]"
    assert FilterStage((), "split", "2", ("x", "y")).render() == "split=2[x][y]"
