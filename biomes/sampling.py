"""
Patch sampling: evaluate a biome profile over a cube of voxels.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Tuple

import numpy as np

from biomes.climate import ClimateField
from biomes.profile import BiomeProfile

logger = logging.getLogger(__name__)


def sample_patch(
    profile: BiomeProfile,
    climate: ClimateField,
    origin: Tuple[int, int, int],
    size: int,
) -> Dict[str, Any]:
    """
    Evaluate a profile for every voxel of a size x size x size patch.

    Args:
        profile: Compiled biome profile
        climate: Source of the per-voxel sample contexts
        origin: World (x, y, z) of the patch corner with the lowest coordinates
        size: Edge length of the patch

    Returns:
        Dictionary containing patch arrays (indexed [x, y, z]) and metadata
    """
    if size <= 0:
        raise ValueError(f"Patch size must be positive, got {size}")

    density = np.zeros((size, size, size), dtype=np.float32)
    voxel_ids = np.zeros((size, size, size), dtype=np.uint16)
    shapes = np.zeros((size, size, size), dtype=np.uint8)

    ox, oy, oz = origin
    for i in range(size):
        for j in range(size):
            for k in range(size):
                context = climate.context_at((ox + i, oy + j, oz + k))
                density[i, j, k] = profile.sample_density(context)
                voxel = profile.sample_voxel(context)
                voxel_ids[i, j, k] = voxel.id
                shapes[i, j, k] = int(voxel.shape)

    patch = {
        "density": density,
        "voxel_ids": voxel_ids,
        "shapes": shapes,
        "origin": np.array(origin, dtype=np.int64),
        "biome": profile.name,
        "seed": climate.seed,
    }

    logger.debug(f"Sampled biome '{profile.name}' at {origin} with size {size}")
    return patch


def save_patch_npz(patch: Dict[str, Any], output_path: Path) -> Path:
    """
    Save patch data as compressed .npz file.

    Args:
        patch: Patch dictionary from sample_patch()
        output_path: Path to save .npz file

    Returns:
        Path to saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    np.savez_compressed(output_path, **patch)

    logger.debug(f"Saved patch to {output_path}")
    return output_path


def get_patch_filename(biome: str, origin: Tuple[int, int, int], output_dir: Path) -> Path:
    x, y, z = origin
    return Path(output_dir) / f"{biome}_x{x}_y{y}_z{z}.npz"
