"""
Pixel helpers shared by extraction, deduplication and atlas composition.

Regions are handled as ``(height, width, 4)`` uint8 RGBA numpy arrays so that
flips are views and equality is a single vectorised comparison.
"""

from typing import Tuple

import numpy as np
from PIL import Image


def to_pixels(image: Image.Image) -> np.ndarray:
    """Convert a Pillow image to an RGBA pixel array."""
    if image.mode != 'RGBA':
        image = image.convert('RGBA')
    return np.asarray(image, dtype=np.uint8)


def to_image(pixels: np.ndarray) -> Image.Image:
    """Convert an RGBA pixel array back to a Pillow image."""
    return Image.fromarray(np.ascontiguousarray(pixels))


def flip_pixels(pixels: np.ndarray, horizontal: bool, vertical: bool) -> np.ndarray:
    """Mirror a region along the requested axes."""
    if horizontal:
        pixels = pixels[:, ::-1]
    if vertical:
        pixels = pixels[::-1, :]
    return pixels


def pixels_equal(a: np.ndarray, b: np.ndarray) -> bool:
    """Exact match: same dimensions and every channel of every pixel equal."""
    return a.shape == b.shape and np.array_equal(a, b)


def crop_region(pixels: np.ndarray, x: int, y: int, w: int, h: int) -> Tuple[np.ndarray, bool]:
    """
    Copy a ``w`` x ``h`` rectangle starting at ``(x, y)``.

    Rectangles reaching outside the image are sampled with wrap-around
    addressing, treating the texture as tiling.

    Returns:
        Tuple of (region pixels, wrapped) where ``wrapped`` tells whether
        wrap-around addressing was needed.
    """
    img_h, img_w = pixels.shape[:2]
    if x >= 0 and y >= 0 and x + w <= img_w and y + h <= img_h:
        return pixels[y:y + h, x:x + w].copy(), False

    rows = (y + np.arange(h)) % img_h
    cols = (x + np.arange(w)) % img_w
    return pixels[np.ix_(rows, cols)], True


def compose_atlas(width: int, height: int, placements) -> Image.Image:
    """
    Paste regions onto a fresh transparent canvas.

    Args:
        width: Atlas width in pixels
        height: Atlas height in pixels
        placements: Iterable of (pixels, x, y)
    """
    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    for pixels, x, y in placements:
        h, w = pixels.shape[:2]
        canvas[y:y + h, x:x + w] = pixels
    return to_image(canvas)
