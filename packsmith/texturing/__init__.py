"""
Texturing utilities for atlas rebuilding.

Includes region pixel helpers, content-aware deduplication and the
free-rectangle atlas packer.
"""
from .dedup import Flip, UniqueTextureArea, deduplicate_areas
from .image_utils import compose_atlas, crop_region, flip_pixels, pixels_equal
from .rect_packer import PackResult, pack_rectangles

__all__ = [
    'Flip',
    'UniqueTextureArea',
    'deduplicate_areas',
    'compose_atlas',
    'crop_region',
    'flip_pixels',
    'pixels_equal',
    'PackResult',
    'pack_rectangles',
]
