"""Region extraction: cut the pixels every face shows out of a texture."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List

import numpy as np

from packsmith.optimizer.context import RunContext
from packsmith.optimizer.uv import uv_flip, uv_to_pixel_box
from packsmith.resourcepack import ResourcePack, Texture
from packsmith.schema.identifier import Identifier
from packsmith.schema.model import PARTICLE_VARIABLE, REFERENCE_PREFIX, Element, Face, Model
from packsmith.texturing.dedup import Flip
from packsmith.texturing.image_utils import crop_region, to_pixels

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class TextureArea:
    """Pixels one face samples from a texture, with a handle back to the face."""
    model_id: Identifier
    element: Element
    face: Face
    pixels: np.ndarray
    original_flip: Flip


def face_texture_map(pack: ResourcePack, model: Model) -> Dict[str, Identifier]:
    """Map ``#variable`` face references to the texture they resolve to."""
    mapping = {}
    for name in model.textures:
        if name == PARTICLE_VARIABLE:
            continue
        resolved = model.resolve_texture(name)
        if resolved is not None and pack.texture_exists(resolved):
            mapping[REFERENCE_PREFIX + name] = resolved
    return mapping


def extract_texture_areas(
    pack: ResourcePack,
    context: RunContext,
    texture: Texture,
    model_ids: Iterable[Identifier],
) -> List[TextureArea]:
    """
    Collect a TextureArea for every face that uses ``texture``.

    Faces with malformed UVs are logged and skipped; degenerate (zero-size)
    boxes are skipped silently.
    """
    pixels = to_pixels(texture.image)
    img_w, img_h = texture.width, texture.height
    areas: List[TextureArea] = []

    for model_id in model_ids:
        model = context.get_model(model_id)
        if model is None or not model.elements:
            continue

        refs = face_texture_map(pack, model)
        warned = False

        for element in model.elements:
            for face_name, face in element.faces.items():
                # Direct (non-#) texture references are not resolved
                if not face.texture or not face.texture.startswith(REFERENCE_PREFIX):
                    continue
                if refs.get(face.texture) != texture.identifier or face.uv is None:
                    continue

                try:
                    uv = face.uv_rect()
                    x, y, w, h = uv_to_pixel_box(uv, img_w, img_h)
                    if w <= 0 or h <= 0:
                        continue

                    patch, wrapped = crop_region(pixels, x, y, w, h)
                    if wrapped and not warned:
                        logger.warning(f"Wrapping out of bounds UVs on {model_id}, check your model!")
                        warned = True

                    areas.append(TextureArea(model_id, element, face, patch, uv_flip(uv)))
                except Exception as e:
                    logger.warning(f"Skipping face '{face_name}' of {model_id}: {e}")

    return areas
