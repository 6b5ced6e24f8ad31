"""
Noise source for ``Simplex`` sampler fields.
"""

import logging
from dataclasses import dataclass, field
from typing import Tuple

import opensimplex

logger = logging.getLogger(__name__)


@dataclass
class NoiseSampler:
    """
    Seeded 3D OpenSimplex noise.

    The generator is built once and only read afterwards, so a sampler can be
    shared by every profile and every worker thread.
    """

    seed: int = 0
    _noise: opensimplex.OpenSimplex = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Initialize the noise generator with the seed."""
        self._noise = opensimplex.OpenSimplex(seed=self.seed)
        logger.debug(f"NoiseSampler initialized with seed={self.seed}")

    def sample(self, position: Tuple[int, int, int]) -> float:
        """
        Get the noise value at a voxel position.

        Args:
            position: World (x, y, z) coordinates

        Returns:
            Noise value, typically in [-1, 1]
        """
        x, y, z = position
        return float(self._noise.noise3(x, y, z))
