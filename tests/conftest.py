# Automatically add the repository root to sys.path for pytest discovery of biomes/
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from biomes.context import SampleContext  # noqa: E402
from biomes.voxels import VoxelTypeRegistry  # noqa: E402


class PositionNoise:
    """Deterministic stand-in for NoiseSampler: a plain function of position."""

    def __init__(self):
        self.calls = 0

    def sample(self, position):
        self.calls += 1
        x, y, z = position
        return x * 0.5 + y * 0.25 - z * 0.125


@pytest.fixture
def voxel_types():
    return VoxelTypeRegistry({"Air": 0, "Dirt": 3, "Grass": 4, "Stone": 7})


@pytest.fixture
def noise():
    return PositionNoise()


@pytest.fixture
def context():
    return SampleContext(
        position=(4, 8, 2), depth=0.1, moisture=0.5, temperature=0.75, density=2.0
    )


def make_context(position=(0, 0, 0), depth=0.0, moisture=0.0, temperature=0.0, density=0.0):
    return SampleContext(
        position=position,
        depth=depth,
        moisture=moisture,
        temperature=temperature,
        density=density,
    )
