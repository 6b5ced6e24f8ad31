"""
Per-sample input and output records for biome evaluation.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple


class VoxelShape(IntEnum):
    """Voxel shapes a profile can produce."""

    CUBE = 0
    SLAB = 1


@dataclass(frozen=True)
class SampleContext:
    """Immutable inputs for evaluating a biome profile at one voxel."""

    position: Tuple[int, int, int]
    depth: float
    moisture: float
    temperature: float
    density: float


@dataclass(frozen=True)
class VoxelRecord:
    """Voxel produced by a biome profile."""

    shape: VoxelShape
    state: int
    id: int
