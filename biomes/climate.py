"""
ClimateField - sample contexts from seed and coordinates

Builds the SampleContext a biome profile is evaluated against: temperature
and moisture come from low-frequency 2D OpenSimplex noise, depth is measured
down from a flat surface level.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

import opensimplex

from biomes.config import climate_settings
from biomes.context import SampleContext

logger = logging.getLogger(__name__)


@dataclass
class ClimateField:
    """Deterministic climate signals for every voxel position of a world."""

    seed: int
    surface_level: int = 64
    temperature_scale: float = 0.002
    moisture_scale: float = 0.003
    _temperature_noise: opensimplex.OpenSimplex = field(init=False, repr=False, compare=False)
    _moisture_noise: opensimplex.OpenSimplex = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Initialize noise generators with seed."""
        # Separate generators so the two signals are not correlated
        self._temperature_noise = opensimplex.OpenSimplex(seed=self.seed + 1)
        self._moisture_noise = opensimplex.OpenSimplex(seed=self.seed + 2)

        logger.info(f"ClimateField initialized with seed={self.seed}")

    @classmethod
    def from_config(cls, config: Dict[str, Any], seed: int) -> "ClimateField":
        settings = climate_settings(config)
        return cls(
            seed=seed,
            surface_level=int(settings["surface_level"]),
            temperature_scale=float(settings["temperature_scale"]),
            moisture_scale=float(settings["moisture_scale"]),
        )

    def get_temperature(self, x: int, z: int) -> float:
        """
        Get temperature for given world coordinates.

        Returns:
            Temperature in [0, 1]
        """
        value = self._temperature_noise.noise2(x * self.temperature_scale, z * self.temperature_scale)
        return (value + 1) / 2

    def get_moisture(self, x: int, z: int) -> float:
        """
        Get moisture for given world coordinates.

        Returns:
            Moisture in [0, 1]
        """
        value = self._moisture_noise.noise2(x * self.moisture_scale, z * self.moisture_scale)
        return (value + 1) / 2

    def get_depth(self, y: int) -> float:
        """Distance below the surface level; negative above it."""
        return float(self.surface_level - y)

    def context_at(self, position: Tuple[int, int, int], density: float = 0.0) -> SampleContext:
        x, y, z = position
        return SampleContext(
            position=(x, y, z),
            depth=self.get_depth(y),
            moisture=self.get_moisture(x, z),
            temperature=self.get_temperature(x, z),
            density=density,
        )
