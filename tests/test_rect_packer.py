"""
Tests for the free-rectangle atlas packer
"""
import itertools

import pytest

from packsmith.exceptions import PackingError
from packsmith.texturing.rect_packer import MaxRectsBin, Rect, next_power_of_2, pack_rectangles


def _rects(sizes, result):
    return [Rect(x, y, w, h) for (w, h), (x, y) in zip(sizes, result.positions)]


def _assert_valid(sizes, result):
    rects = _rects(sizes, result)
    for r in rects:
        assert r.x >= 0 and r.y >= 0
        assert r.x + r.w <= result.width and r.y + r.h <= result.height
    for a, b in itertools.combinations(rects, 2):
        assert not a.intersects(b), f"{a} overlaps {b}"


class TestPackRectangles:

    def test_empty(self):
        result = pack_rectangles([])
        assert result.positions == []
        assert (result.width, result.height) == (16, 16)

    def test_single_small_rect_uses_minimum_canvas(self):
        result = pack_rectangles([(8, 8)])
        assert (result.width, result.height) == (16, 16)
        assert result.positions == [(0, 0)]

    def test_start_size_is_power_of_two_of_largest_side(self):
        result = pack_rectangles([(20, 5)])
        assert (result.width, result.height) == (32, 16)

    def test_largest_placed_first(self):
        sizes = [(4, 4), (16, 16)]
        result = pack_rectangles(sizes)
        assert (result.width, result.height) == (32, 16)
        assert result.positions == [(16, 0), (0, 0)]

    def test_grows_smaller_side(self):
        sizes = [(16, 16)] * 5
        result = pack_rectangles(sizes)
        assert (result.width, result.height) == (64, 32)
        _assert_valid(sizes, result)

    def test_mixed_sizes_never_overlap(self):
        sizes = [(7, 3), (16, 9), (2, 2), (5, 11), (30, 4), (1, 1), (12, 12), (3, 8), (9, 9), (4, 20)]
        result = pack_rectangles(sizes)
        assert len(result.positions) == len(sizes)
        _assert_valid(sizes, result)

    def test_ceiling(self):
        with pytest.raises(PackingError):
            pack_rectangles([(20, 20)], max_size=16)

    def test_ceiling_after_growth(self):
        with pytest.raises(PackingError):
            pack_rectangles([(16, 16)] * 5, max_size=32)


class TestMaxRectsBin:

    def test_short_side_fit_prefers_tight_slot(self):
        bin_ = MaxRectsBin(32, 32)
        bin_.free_rects = [Rect(0, 0, 32, 32), Rect(0, 0, 9, 30)]
        node = bin_.find_position(8, 8)
        assert (node.x, node.y) == (0, 0)
        # The 9-wide slot leaves a short side of 1 vs 24 on the full canvas
        bin_.free_rects = [Rect(0, 0, 32, 32), Rect(10, 0, 9, 30)]
        node = bin_.find_position(8, 8)
        assert (node.x, node.y) == (10, 0)

    def test_free_list_has_no_contained_rects(self):
        bin_ = MaxRectsBin(32, 32)
        for w, h in [(10, 6), (4, 12), (7, 7), (3, 3)]:
            assert bin_.insert(w, h) is not None
        for a, b in itertools.permutations(bin_.free_rects, 2):
            assert not a.contains(b)

    def test_insert_fails_when_full(self):
        bin_ = MaxRectsBin(16, 16)
        assert bin_.insert(16, 16) is not None
        assert bin_.free_rects == []
        assert bin_.insert(1, 1) is None


def test_next_power_of_2():
    assert [next_power_of_2(n) for n in (1, 2, 3, 16, 17)] == [1, 2, 4, 16, 32]
