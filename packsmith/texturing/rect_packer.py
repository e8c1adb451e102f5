"""
Free-rectangle (MaxRects) bin packer.

Places axis-aligned rectangles into a power-of-2 canvas, growing the canvas
until everything fits:

    1. Free list starts as the whole canvas.
    2. Rectangles are placed largest side first.
    3. Each rectangle goes into the free rectangle with the smallest
       short-side leftover (ties: smallest long-side leftover).
    4. Every free rectangle overlapping the placement is split into up to
       four residual rectangles; contained free rectangles are pruned.
    5. If something does not fit, the smaller canvas side is doubled and the
       whole attempt is repeated.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from packsmith.exceptions import PackingError

logger = logging.getLogger(__name__)

MIN_ATLAS_SIZE = 16
MAX_ATLAS_SIZE = 16384


@dataclass
class Rect:
    x: int
    y: int
    w: int
    h: int

    def intersects(self, other: "Rect") -> bool:
        return not (
            other.x >= self.x + self.w or
            other.x + other.w <= self.x or
            other.y >= self.y + self.h or
            other.y + other.h <= self.y
        )

    def contains(self, other: "Rect") -> bool:
        """True if ``other`` lies completely inside this rectangle."""
        return (
            other.x >= self.x and other.y >= self.y and
            other.x + other.w <= self.x + self.w and
            other.y + other.h <= self.y + self.h
        )


@dataclass
class PackResult:
    width: int
    height: int
    positions: List[Tuple[int, int]]  # (x, y) per input rectangle, in input order


def next_power_of_2(n: int) -> int:
    """Return the next power of 2 >= n."""
    p = 1
    while p < n:
        p <<= 1
    return p


class MaxRectsBin:
    """One packing attempt on a fixed-size canvas."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.free_rects: List[Rect] = [Rect(0, 0, width, height)]

    def find_position(self, width: int, height: int) -> Optional[Rect]:
        """Best short-side-fit free position for a rectangle, or None."""
        best = None
        best_short = best_long = None

        for free in self.free_rects:
            if width > free.w or height > free.h:
                continue
            leftover_w = free.w - width
            leftover_h = free.h - height
            short_side = min(leftover_w, leftover_h)
            long_side = max(leftover_w, leftover_h)

            if best is None or short_side < best_short or (short_side == best_short and long_side < best_long):
                best = Rect(free.x, free.y, width, height)
                best_short, best_long = short_side, long_side

        return best

    def insert(self, width: int, height: int) -> Optional[Rect]:
        """Place a rectangle and update the free list. Returns None if it cannot fit."""
        node = self.find_position(width, height)
        if node is None:
            return None
        self._split_free_rects(node)
        self._prune_free_rects()
        return node

    def _split_free_rects(self, node: Rect) -> None:
        kept: List[Rect] = []
        residuals: List[Rect] = []

        for free in self.free_rects:
            if not free.intersects(node):
                kept.append(free)
                continue

            # Left and right of the placed node
            if free.x < node.x < free.x + free.w:
                residuals.append(Rect(free.x, free.y, node.x - free.x, free.h))
            if node.x + node.w < free.x + free.w:
                residuals.append(Rect(node.x + node.w, free.y, free.x + free.w - (node.x + node.w), free.h))
            # Above and below the placed node
            if free.y < node.y < free.y + free.h:
                residuals.append(Rect(free.x, free.y, free.w, node.y - free.y))
            if node.y + node.h < free.y + free.h:
                residuals.append(Rect(free.x, node.y + node.h, free.w, free.y + free.h - (node.y + node.h)))

        kept.extend(r for r in residuals if r.w > 0 and r.h > 0)
        self.free_rects = kept

    def _prune_free_rects(self) -> None:
        """Drop free rectangles that are fully contained in another one."""
        rects = self.free_rects
        i = 0
        while i < len(rects):
            j = i + 1
            removed_i = False
            while j < len(rects):
                if rects[j].contains(rects[i]):
                    rects.pop(i)
                    removed_i = True
                    break
                if rects[i].contains(rects[j]):
                    rects.pop(j)
                    continue
                j += 1
            if not removed_i:
                i += 1


def try_pack(width: int, height: int, sizes: Sequence[Tuple[int, int]], order: Sequence[int]) -> Optional[List[Tuple[int, int]]]:
    """Attempt to place every size on a ``width`` x ``height`` canvas."""
    bin_ = MaxRectsBin(width, height)
    positions: List[Optional[Tuple[int, int]]] = [None] * len(sizes)

    for index in order:
        w, h = sizes[index]
        node = bin_.insert(w, h)
        if node is None:
            return None
        positions[index] = (node.x, node.y)

    return positions


def pack_rectangles(
    sizes: Sequence[Tuple[int, int]],
    min_size: int = MIN_ATLAS_SIZE,
    max_size: int = MAX_ATLAS_SIZE,
) -> PackResult:
    """
    Pack rectangles into the smallest canvas reachable by doubling.

    Args:
        sizes: (width, height) per rectangle
        min_size: Minimum starting canvas side
        max_size: Hard ceiling for either canvas side

    Returns:
        PackResult with canvas size and one (x, y) per input rectangle

    Raises:
        PackingError: if the canvas would have to exceed ``max_size``
    """
    if not sizes:
        return PackResult(min_size, min_size, [])

    # Largest side first; sorted() is stable so equal sides keep input order
    order = sorted(range(len(sizes)), key=lambda i: max(sizes[i]), reverse=True)

    width = next_power_of_2(max(min_size, max(w for w, _ in sizes)))
    height = next_power_of_2(max(min_size, max(h for _, h in sizes)))

    while True:
        if width > max_size or height > max_size:
            raise PackingError(f"Could not pack {len(sizes)} rectangles into atlas up to {max_size}x{max_size}")

        positions = try_pack(width, height, sizes, order)
        if positions is not None:
            logger.debug(f"Packed {len(sizes)} rectangles into {width}x{height}")
            return PackResult(width, height, positions)

        # Grow the smaller side
        if width <= height:
            width *= 2
        else:
            height *= 2
