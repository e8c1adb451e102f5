"""
Resource pack texture optimizer.

We optimize the pack textures in these steps:
    - collect root models that can be rewritten safely (see selection)
    - group them by texture
    - cut the texture area of every face
    - deduplicate areas, mirrored copies included
    - repack the unique areas into a new atlas
    - keep the atlas only if it is smaller, then patch the UVs of every model
    - once every group is done, write the new textures and all patched models
      as one batch
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple, Union

from PIL import Image

from packsmith.optimizer.context import RunContext
from packsmith.optimizer.extraction import TextureArea, extract_texture_areas
from packsmith.optimizer.selection import select_candidates
from packsmith.optimizer.uv import face_uv_for_match, pixel_box_to_uv
from packsmith.resourcepack import ResourcePack, WriteBatch
from packsmith.schema.identifier import Identifier
from packsmith.schema.model import Resolved, UVRect
from packsmith.texturing.dedup import UniqueTextureArea, deduplicate_areas
from packsmith.texturing.image_utils import compose_atlas
from packsmith.texturing.rect_packer import MAX_ATLAS_SIZE, MIN_ATLAS_SIZE, pack_rectangles

logger = logging.getLogger(__name__)


@dataclass
class PackedAtlas:
    """A rebuilt texture and the placed unique areas it contains."""
    identifier: Identifier
    image: Image.Image
    areas: List[UniqueTextureArea]

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size


@dataclass
class GroupResult:
    texture: Identifier
    original_size: Tuple[int, int]
    new_size: Optional[Tuple[int, int]]
    area_count: int
    unique_count: int
    reason: Optional[str] = None  # why a group was skipped


@dataclass
class GroupFailure:
    texture: Identifier
    error: str


@dataclass
class OptimizationReport:
    groups_found: int = 0
    optimized: List[GroupResult] = field(default_factory=list)
    skipped: List[GroupResult] = field(default_factory=list)
    failed: List[GroupFailure] = field(default_factory=list)
    written_models: Set[Identifier] = field(default_factory=set)

    @property
    def optimized_count(self) -> int:
        return len(self.optimized)


def pack_unique_areas(
    areas: List[UniqueTextureArea],
    identifier: Identifier,
    min_size: int = MIN_ATLAS_SIZE,
    max_size: int = MAX_ATLAS_SIZE,
) -> PackedAtlas:
    """
    Place unique areas on a new atlas and composite their canonical images.

    Raises:
        PackingError: if the areas do not fit under ``max_size``
    """
    result = pack_rectangles([(a.width, a.height) for a in areas], min_size=min_size, max_size=max_size)
    for area, (x, y) in zip(areas, result.positions):
        area.set_position(x, y)

    image = compose_atlas(result.width, result.height, ((a.canonical, a.x, a.y) for a in areas))
    return PackedAtlas(identifier, image, list(areas))


def compute_face_uvs(packed: PackedAtlas) -> Dict[int, Tuple[TextureArea, UVRect]]:
    """New UV for every matched area, keyed by ``id()`` of the area's face."""
    atlas_w, atlas_h = packed.size
    patches = {}
    for unique in packed.areas:
        canonical_uv = pixel_box_to_uv(unique.x, unique.y, unique.width, unique.height, atlas_w, atlas_h)
        for match in unique.matches:
            uv = face_uv_for_match(canonical_uv, match.transform)
            patches[id(match.area.face)] = (match.area, uv)
    return patches


class Optimizer:
    """
    Rewrites a resource pack so each eligible texture holds only unique areas.

    Args:
        pack: Asset store to read from
        output_root: Pack directory the rewritten textures/models go to
        workers: Number of texture groups processed in parallel
        max_atlas_size: Hard ceiling for either atlas side
        min_atlas_size: Minimum starting atlas side
    """

    def __init__(
        self,
        pack: ResourcePack,
        output_root: Union[str, Path],
        *,
        workers: int = 1,
        max_atlas_size: int = MAX_ATLAS_SIZE,
        min_atlas_size: int = MIN_ATLAS_SIZE,
    ):
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.pack = pack
        self.output_root = Path(output_root)
        self.workers = workers
        self.max_atlas_size = max_atlas_size
        self.min_atlas_size = min_atlas_size
        self.context = RunContext()

    def optimize(self) -> OptimizationReport:
        logger.info("Starting optimization...")
        self.context = RunContext()
        report = OptimizationReport()

        groups = select_candidates(self.pack, self.context)
        report.groups_found = len(groups)
        logger.info(f"Found {len(groups)} texture groups to optimize.")

        items = list(groups.items())
        if self.workers > 1 and len(items) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                outcomes = list(executor.map(lambda item: self._run_group(*item), items))
        else:
            outcomes = [self._run_group(key, model_ids) for key, model_ids in items]

        for outcome in outcomes:
            if isinstance(outcome, GroupFailure):
                report.failed.append(outcome)
            elif outcome.reason is None:
                report.optimized.append(outcome)
            else:
                report.skipped.append(outcome)

        self.write_output(report)

        logger.info(f"Optimized {report.optimized_count} textures")
        logger.info(f"Optimization complete. Output at: {self.output_root}")
        return report

    def write_output(self, report: OptimizationReport) -> None:
        """
        Write every accepted atlas and every patched model.

        Nothing is replaced unless all files could be staged, so a failed write
        never leaves a new atlas next to a model that still has its old UVs.

        Raises:
            AssetWriteError: if any texture or model cannot be written
        """
        touched = sorted(self.context.touched, key=str)
        with WriteBatch(self.output_root) as batch:
            for texture_id in sorted(self.context.atlases, key=str):
                batch.add_texture(texture_id, self.context.atlases[texture_id])
            for model_id in touched:
                batch.add_model(model_id, self.context.models[model_id])
        report.written_models.update(touched)
        logger.info(f"Wrote {len(self.context.atlases)} textures and {len(touched)} models")

    def _run_group(self, texture_id: Identifier, model_ids: Set[Identifier]):
        logger.info(f"Processing texture: {texture_id} ({len(model_ids)} models)")
        try:
            return self.process_texture_group(texture_id, model_ids)
        except Exception as e:
            logger.exception(f"Failed to process group for texture {texture_id}: {e}")
            return GroupFailure(texture_id, str(e))

    def process_texture_group(self, texture_id: Identifier, model_ids: Set[Identifier]) -> GroupResult:
        """
        Extract, deduplicate, pack and (if smaller) apply one texture group.

        The accepted atlas is kept in the run context; ``write_output`` saves it.

        Raises:
            PackingError: if the unique areas exceed the atlas ceiling
        """
        texture = self.pack.load_texture(texture_id)
        if texture is None:
            return GroupResult(texture_id, (0, 0), None, 0, 0, reason="texture could not be loaded")

        original_size = (texture.width, texture.height)
        ordered_ids = sorted(model_ids, key=str)

        areas = extract_texture_areas(self.pack, self.context, texture, ordered_ids)
        if not areas:
            logger.warning(f"No valid texture areas found for {texture_id}, skipping.")
            return GroupResult(texture_id, original_size, None, 0, 0, reason="no valid texture areas")

        unique_areas = deduplicate_areas(areas)
        packed = pack_unique_areas(unique_areas, texture_id, self.min_atlas_size, self.max_atlas_size)
        new_w, new_h = packed.size

        result = GroupResult(texture_id, original_size, packed.size, len(areas), len(unique_areas))

        # Only keep the atlas if we made it smaller
        if not (new_w < texture.width or new_h < texture.height):
            logger.info(f"Atlas for {texture_id} is not smaller ({new_w}x{new_h}), leaving it unchanged")
            result.reason = "atlas not smaller"
            return result

        self.patch_models(ordered_ids, packed, texture_id)
        self.context.add_atlas(texture_id, packed.image)
        logger.info(
            f"Optimized texture {texture_id}: {texture.width}x{texture.height} -> {new_w}x{new_h} "
            f"({len(areas)} areas, {len(unique_areas)} unique)"
        )
        return result

    def patch_models(self, model_ids: List[Identifier], packed: PackedAtlas, original_id: Identifier) -> None:
        """Point every face of the group at its area in the new atlas."""
        patches = compute_face_uvs(packed)

        by_model: Dict[Identifier, List[Tuple[TextureArea, UVRect]]] = {}
        for area, uv in patches.values():
            by_model.setdefault(area.model_id, []).append((area, uv))

        for model_id in model_ids:
            if self.context.get_model(model_id) is None:
                continue
            with self.context.edit_model(model_id) as model:
                for name, ref in list(model.textures.items()):
                    if isinstance(ref, Resolved) and ref.identifier == original_id:
                        model.textures[name] = Resolved(identifier=packed.identifier)

                for area, uv in by_model.get(model_id, []):
                    area.face.uv = list(uv)
