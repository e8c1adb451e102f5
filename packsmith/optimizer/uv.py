"""
UV algebra between the fixed 0-16 model space and texture pixels.

A UV rectangle ``[u1, v1, u2, v2]`` shows the pixels of its bounding box,
mirrored on every axis whose endpoints are reversed. Swapping endpoints
therefore composes with flips of the displayed image, which is what lets a
face be pointed at a canonical image stored in a different orientation.
"""

import math
from typing import Tuple

from packsmith.schema.model import UVRect
from packsmith.texturing.dedup import Flip

UV_SPACE = 16.0

PixelBox = Tuple[int, int, int, int]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def uv_to_pixel_box(uv: UVRect, width: int, height: int) -> PixelBox:
    """
    Map a UV rectangle onto the pixel bounding box ``(x, y, w, h)`` it covers
    in a ``width`` x ``height`` texture.
    """
    u1, v1, u2, v2 = uv
    x1 = u1 / UV_SPACE * width
    y1 = v1 / UV_SPACE * height
    x2 = u2 / UV_SPACE * width
    y2 = v2 / UV_SPACE * height

    return (
        _round_half_up(min(x1, x2)),
        _round_half_up(min(y1, y2)),
        _round_half_up(abs(x2 - x1)),
        _round_half_up(abs(y2 - y1)),
    )


def uv_flip(uv: UVRect) -> Flip:
    """Mirroring encoded by the endpoint order of a UV rectangle."""
    u1, v1, u2, v2 = uv
    return Flip.of(u1 > u2, v1 > v2)


def flip_uv(uv: UVRect, flip: Flip) -> UVRect:
    """Swap U endpoints for horizontal flips and V endpoints for vertical flips."""
    u1, v1, u2, v2 = uv
    if flip.horizontal:
        u1, u2 = u2, u1
    if flip.vertical:
        v1, v2 = v2, v1
    return (u1, v1, u2, v2)


def pixel_box_to_uv(x: int, y: int, w: int, h: int, atlas_width: int, atlas_height: int) -> UVRect:
    """UV rectangle (non-mirrored) covering a pixel box of an atlas."""
    return (
        x / atlas_width * UV_SPACE,
        y / atlas_height * UV_SPACE,
        (x + w) / atlas_width * UV_SPACE,
        (y + h) / atlas_height * UV_SPACE,
    )


def face_uv_for_match(canonical_uv: UVRect, transform: Flip) -> UVRect:
    """
    UV for a face whose area was matched to a canonical image.

    The canonical image is stored as the face rendered it, with the area's own
    mirroring already applied, so the face shows ``transform`` of it and only
    ``transform`` is swapped into the UV. Undoing ``original_flip . transform``
    on the new UV's box gives back the area's raw region.
    """
    return flip_uv(canonical_uv, transform)
