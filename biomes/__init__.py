"""
Biome formula engine.

Compiles the textual formulas stored in biome profile documents into typed
instruction trees and evaluates them per voxel to produce density, voxel type
and voxel shape values.
"""

from biomes.context import SampleContext, VoxelRecord, VoxelShape
from biomes.errors import (
    BiomeConfigError,
    BiomeLoadError,
    FormulaSyntaxError,
    MalformedConfigError,
    UnresolvedReferenceError,
    UnresolvedSymbolError,
    UnsupportedInstructionError,
)
from biomes.profile import BiomeProfile
from biomes.registry import BiomeRegistry, LazyBiomeRegistry, load_biomes

__version__ = "0.1.0"

__all__ = [
    "BiomeConfigError",
    "BiomeLoadError",
    "BiomeProfile",
    "BiomeRegistry",
    "FormulaSyntaxError",
    "LazyBiomeRegistry",
    "MalformedConfigError",
    "SampleContext",
    "UnresolvedReferenceError",
    "UnresolvedSymbolError",
    "UnsupportedInstructionError",
    "VoxelRecord",
    "VoxelShape",
    "load_biomes",
]
