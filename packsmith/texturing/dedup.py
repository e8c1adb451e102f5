"""
Content-aware deduplication of texture regions.

Every region is first "rendered" with its own mirroring, giving the pixels as
they appear in-world. Rendered regions that are pixel-identical up to one of
four symmetries (identity, horizontal, vertical, both) share one canonical
image. The first canonical image that matches wins, in discovery order.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Sequence, Tuple

import numpy as np

from .image_utils import flip_pixels, pixels_equal

logger = logging.getLogger(__name__)


class Flip(Enum):
    """Symmetry transforms of a rectangular region. Each one is its own inverse."""
    NONE = (False, False)
    H = (True, False)
    V = (False, True)
    HV = (True, True)

    @property
    def horizontal(self) -> bool:
        return self.value[0]

    @property
    def vertical(self) -> bool:
        return self.value[1]

    @classmethod
    def of(cls, horizontal: bool, vertical: bool) -> "Flip":
        return cls((bool(horizontal), bool(vertical)))

    def compose(self, other: "Flip") -> "Flip":
        return Flip.of(self.horizontal != other.horizontal, self.vertical != other.vertical)

    def apply(self, pixels: np.ndarray) -> np.ndarray:
        return flip_pixels(pixels, self.horizontal, self.vertical)


# Order in which symmetries are tried against a canonical image
MATCH_ORDER = (Flip.NONE, Flip.H, Flip.V, Flip.HV)


@dataclass
class Match:
    area: object
    transform: Flip  # maps the canonical image onto this area's rendered pixels


@dataclass
class UniqueTextureArea:
    """A canonical image and every area that shows it, plus its atlas placement."""
    canonical: np.ndarray
    matches: List[Match] = field(default_factory=list)
    x: int = 0
    y: int = 0

    @property
    def width(self) -> int:
        return self.canonical.shape[1]

    @property
    def height(self) -> int:
        return self.canonical.shape[0]

    def add_match(self, area, transform: Flip) -> None:
        self.matches.append(Match(area, transform))

    def set_position(self, x: int, y: int) -> None:
        self.x = x
        self.y = y


def render_area(area) -> np.ndarray:
    """Apply an area's original mirroring to its raw pixels."""
    return area.original_flip.apply(area.pixels)


def find_transform(rendered: np.ndarray, canonical: np.ndarray):
    """Return the first symmetry mapping ``canonical`` onto ``rendered``, or None."""
    if rendered.shape != canonical.shape:
        return None
    for transform in MATCH_ORDER:
        if pixels_equal(rendered, transform.apply(canonical)):
            return transform
    return None


def deduplicate_areas(areas: Sequence) -> List[UniqueTextureArea]:
    """
    Partition areas into UniqueTextureAreas.

    Areas need ``pixels`` (raw region, numpy RGBA) and ``original_flip``
    (Flip) attributes.
    """
    unique_list: List[UniqueTextureArea] = []
    # Candidates bucketed by shape; each bucket keeps discovery order
    by_shape: Dict[Tuple[int, ...], List[UniqueTextureArea]] = {}

    for area in areas:
        rendered = render_area(area)
        candidates = by_shape.setdefault(rendered.shape, [])

        for unique in candidates:
            transform = find_transform(rendered, unique.canonical)
            if transform is not None:
                unique.add_match(area, transform)
                break
        else:
            unique = UniqueTextureArea(canonical=np.ascontiguousarray(rendered))
            unique.add_match(area, Flip.NONE)
            candidates.append(unique)
            unique_list.append(unique)

    logger.debug(f"Deduplicated {len(areas)} areas into {len(unique_list)} unique areas")
    return unique_list
