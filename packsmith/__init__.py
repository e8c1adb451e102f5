"""
PackSmith - Shrink resource pack textures by deduplicating and repacking UV areas

Finds the texture areas that block/item models actually use, merges
identical (and mirrored) areas, repacks them into the smallest atlas and
rewrites the model UVs to match.
"""

from packsmith.optimizer import Optimizer, OptimizationReport
from packsmith.resourcepack import ResourcePack
from packsmith.schema.identifier import Identifier

__version__ = "0.0.1"
__all__ = ["Optimizer", "OptimizationReport", "ResourcePack", "Identifier", "optimize_pack"]


def optimize_pack(input_dir, output_dir, **options) -> OptimizationReport:
    """
    Optimize the pack at ``input_dir``, writing changed files into ``output_dir``.

    ``output_dir`` is expected to already hold a copy of the pack; only
    optimized textures and their models are overwritten. Keyword options are
    passed to Optimizer (workers, max_atlas_size, min_atlas_size).

    Example:
        >>> report = optimize_pack("pack", "pack_out")
        >>> print(report.optimized_count)
    """
    return Optimizer(ResourcePack(input_dir), output_dir, **options).optimize()
