"""
Candidate selection: which models may be rewritten against which texture.

A model is eligible when it
    - has no parent,
    - has at least one element with at least one face,
    - resolves at least one non-particle texture variable,
    - uses no animated (``.mcmeta``) non-particle texture,
    - and, if other models use it as parent, none of those children defines
      its own elements or uses an animated texture.
"""

import logging
from typing import Dict, List, Set

from packsmith.optimizer.context import RunContext
from packsmith.resourcepack import ResourcePack
from packsmith.schema.identifier import Identifier
from packsmith.schema.model import Model

logger = logging.getLogger(__name__)


def _children_allow_rewrite(pack: ResourcePack, children: List[Model]) -> bool:
    for child in children:
        if child.elements:
            return False
        if any(pack.texture_has_metadata(key) for key in child.non_particle_textures()):
            return False
    return True


def is_eligible(pack: ResourcePack, model: Model, children: List[Model]) -> bool:
    """Apply the eligibility rules to one loaded model."""
    if model.parent is not None:
        return False
    if not model.has_geometry():
        return False

    textures = model.non_particle_textures()
    if not textures:
        return False
    if any(pack.texture_has_metadata(key) for key in textures):
        return False

    if children and not _children_allow_rewrite(pack, children):
        return False
    return True


def select_candidates(pack: ResourcePack, context: RunContext) -> Dict[Identifier, Set[Identifier]]:
    """
    Group eligible models by the textures they reference.

    Eligible models are cached in ``context`` so every group works on the
    same instances.

    Returns:
        Dict of texture identifier -> set of model identifiers
    """
    loaded: Dict[Identifier, Model] = {}
    for key in pack.discover_model_identifiers():
        model = pack.load_model(key)
        if model is not None:
            loaded[key] = model

    parent_to_children: Dict[Identifier, List[Model]] = {}
    for model in loaded.values():
        if isinstance(model.parent, Identifier):
            parent_to_children.setdefault(model.parent, []).append(model)

    texture_to_models: Dict[Identifier, Set[Identifier]] = {}
    for key, model in loaded.items():
        children = parent_to_children.get(key, [])
        if not is_eligible(pack, model, children):
            continue

        context.add_model(key, model)
        for texture_key in sorted(model.non_particle_textures(), key=str):
            if not pack.texture_exists(texture_key) or pack.texture_has_metadata(texture_key):
                continue
            texture_to_models.setdefault(texture_key, set()).add(key)

    logger.info(f"Selected {len(context.models)} of {len(loaded)} models in {len(texture_to_models)} texture groups")
    return texture_to_models
