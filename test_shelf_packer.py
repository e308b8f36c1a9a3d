#!/usr/bin/env python3
"""
Tests for the shelf packer: placement scenarios, padding and atlas invariants.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(__file__))

import random

import pytest

from spritepacker_core import AtlasConfig, ImageEntry, InvalidConfigError, ShelfPacker, SortMethod, pack, sort_entries


def make_entry(name, width, height, byte_size=0, modified_at=0):
    return ImageEntry(f"/sprites/{name}.png", name, width, height, byte_size, modified_at)


def positions(result):
    return [(rect.x, rect.y) for rect in result.placed]


def assert_layout_valid(result, entries, config):
    """Check containment, no-overlap and completeness of a pack result."""
    p = config.padding
    assert len(result.placed) + len(result.rejected) == len(entries)

    boxes = []
    for rect in result.placed:
        assert rect.x - p >= 0
        assert rect.y - p >= 0
        assert rect.x + rect.width + p <= config.canvas_width
        assert rect.y + rect.height + p <= config.canvas_height
        boxes.append((rect.x - p, rect.y - p, rect.x + rect.width + p, rect.y + rect.height + p))

    for i in range(len(boxes)):
        for j in range(i + 1, len(boxes)):
            a, b = boxes[i], boxes[j]
            overlap = a[0] < b[2] and b[0] < a[2] and a[1] < b[3] and b[1] < a[3]
            assert not overlap, f"{result.placed[i]} overlaps {result.placed[j]}"

    accounted = [rect.source_identifier for rect in result.placed] + result.rejected
    assert sorted(accounted) == sorted(e.identifier for e in entries)


def test_three_squares_wrap_to_second_row():
    entries = [make_entry(f"s{i}", 80, 80) for i in range(3)]
    result = pack(entries, AtlasConfig(200, 200, 0))

    assert positions(result) == [(0, 0), (80, 0), (0, 80)]
    assert result.rejected == []
    assert [r.source_identifier for r in result.placed] == [e.identifier for e in entries]


def test_entry_wider_than_canvas_is_rejected():
    wide = make_entry("wide", 300, 50)
    small = make_entry("small", 50, 50)
    result = pack([wide, small], AtlasConfig(200, 200, 0))

    assert result.rejected == [wide.identifier]
    # Rejection does not move the cursor
    assert positions(result) == [(0, 0)]


def test_padded_entry_larger_than_canvas_is_rejected():
    entry = make_entry("big", 90, 90)
    result = pack([entry], AtlasConfig(100, 100, 10))

    assert result.placed == []
    assert result.rejected == [entry.identifier]


def test_empty_input():
    result = pack([], AtlasConfig(512, 512, 4))

    assert result.placed == []
    assert result.rejected == []
    assert result.coverage() == 0.0


def test_tall_entry_does_not_break_row():
    entries = [make_entry("a", 50, 50), make_entry("tall", 20, 150), make_entry("b", 50, 50)]
    result = pack(entries, AtlasConfig(100, 100, 0))

    assert result.rejected == ["/sprites/tall.png"]
    assert positions(result) == [(0, 0), (50, 0)]


def test_vertical_overflow_keeps_row_break():
    entries = [make_entry("a", 60, 60), make_entry("b", 50, 50), make_entry("c", 30, 30)]
    result = pack(entries, AtlasConfig(100, 100, 0))

    assert result.rejected == ["/sprites/b.png"]
    assert positions(result) == [(0, 0), (0, 60)]


def test_padding_spacing():
    entries = [make_entry(f"p{i}", 20, 20) for i in range(5)]
    config = AtlasConfig(100, 100, 2)
    result = pack(entries, config)

    assert positions(result) == [(2, 2), (26, 2), (50, 2), (74, 2), (2, 28)]
    assert all(r.width == 20 and r.height == 20 for r in result.placed)
    assert_layout_valid(result, entries, config)


def test_zero_padding_allows_touching():
    entries = [make_entry(f"t{i}", 50, 50) for i in range(4)]
    result = pack(entries, AtlasConfig(100, 100, 0))

    assert positions(result) == [(0, 0), (50, 0), (0, 50), (50, 50)]
    assert result.coverage() == 1.0


def test_canvas_smaller_than_padding_rejects_everything():
    entries = [make_entry("dot", 1, 1), make_entry("dot2", 1, 1)]
    result = pack(entries, AtlasConfig(10, 10, 6))

    assert result.placed == []
    assert result.rejected == [e.identifier for e in entries]


def test_degenerate_entries_are_rejected():
    entries = [make_entry("zero", 0, 10), make_entry("neg", 10, -1), make_entry("ok", 10, 10)]
    result = pack(entries, AtlasConfig(64, 64, 0))

    assert result.rejected == ["/sprites/zero.png", "/sprites/neg.png"]
    assert positions(result) == [(0, 0)]


@pytest.mark.parametrize("width,height,padding", [
    (0, 100, 0),
    (100, 0, 0),
    (-5, 100, 0),
    (100, 100, -1),
])
def test_invalid_config(width, height, padding):
    with pytest.raises(InvalidConfigError):
        AtlasConfig(width, height, padding)


def test_packer_revalidates_config():
    config = AtlasConfig(100, 100, 0)
    config.padding = -3
    with pytest.raises(InvalidConfigError):
        ShelfPacker(config)


def test_config_from_size_string():
    config = AtlasConfig.from_size_string("1024x512", 2, SortMethod.SIZE_DESC)
    assert (config.canvas_width, config.canvas_height, config.padding) == (1024, 512, 2)
    assert AtlasConfig.from_size_string("256").size_label == "256x256"

    with pytest.raises(InvalidConfigError):
        AtlasConfig.from_size_string("big")
    with pytest.raises(InvalidConfigError):
        AtlasConfig.from_size_string("1x2x3")


def test_config_accepts_sort_method_name():
    config = AtlasConfig(64, 64, 0, "fileSize-asc")
    assert config.sort_method is SortMethod.SIZE_ASC


def test_placement_lookup():
    entries = [make_entry("a", 10, 10), make_entry("huge", 500, 10)]
    result = pack(entries, AtlasConfig(64, 64, 0))

    assert result.placement_for("/sprites/a.png").x == 0
    assert result.placement_for("/sprites/huge.png") is None


def test_random_layouts_hold_invariants():
    rng = random.Random(1234)
    for padding in (0, 1, 4):
        entries = [make_entry(f"r{i}", rng.randint(1, 120), rng.randint(1, 120),
                              rng.randint(100, 5000), rng.randint(0, 10 ** 6))
                   for i in range(150)]
        config = AtlasConfig(512, 384, padding)
        result = pack(sort_entries(entries, SortMethod.SIZE_DESC), config)

        assert result.placed
        assert_layout_valid(result, entries, config)


def test_packing_is_deterministic():
    rng = random.Random(99)
    entries = [make_entry(f"d{i}", rng.randint(5, 60), rng.randint(5, 60), rng.choice([10, 20, 30]))
               for i in range(80)]
    config = AtlasConfig(256, 256, 2, SortMethod.SIZE_ASC)

    first = pack(sort_entries(entries, config.sort_method), config)
    second = pack(sort_entries(list(entries), config.sort_method), config)

    assert first == second


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
