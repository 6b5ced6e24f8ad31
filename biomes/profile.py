"""
Biome profiles: the compiled form of one biome profile document.

A document looks like::

    {
      "Samplers": [
        {"Name": "Hills", "Type": "Simplex", "Wavelength": 64, "Amplitude": 8},
        {"Name": "Wet", "Type": "Formula", "Formula": "Add(Moisture,0.1)"}
      ],
      "Voxel Density": "If(Less(Depth,0.2),Wet,Hills)",
      "Voxel Type": "Voxel(Stone)",
      "Voxel Shape": "CUBE"
    }
"""

import json
import logging
from typing import Any, Dict, Mapping, Optional

from biomes.compiler import FormulaCompiler, nesting_error, require_value
from biomes.context import SampleContext, VoxelRecord, VoxelShape
from biomes.errors import BiomeConfigError, MalformedConfigError
from biomes.instructions import Instruction, iter_nodes

logger = logging.getLogger(__name__)

DENSITY_KEY = "Voxel Density"
TYPE_KEY = "Voxel Type"
SHAPE_KEY = "Voxel Shape"
SAMPLERS_KEY = "Samplers"

DEFAULT_VOXEL_STATE = 0


class BiomeProfile:
    """Three compiled formulas producing density, voxel type and voxel shape."""

    def __init__(
        self,
        name: str,
        density_formula: Instruction[float],
        id_formula: Instruction[int],
        shape_formula: Instruction[VoxelShape],
        fields: Optional[Dict[str, Instruction[float]]] = None,
    ):
        self.name = name
        self.density_formula = density_formula
        self.id_formula = id_formula
        self.shape_formula = shape_formula
        self.fields = dict(fields or {})

    @classmethod
    def from_document(
        cls,
        name: str,
        document: Mapping[str, Any],
        voxel_types,
        noise,
    ) -> "BiomeProfile":
        """
        Compile a parsed profile document.

        Sampler fields are compiled first, in the order they are listed, then
        the three top-level formulas.

        Args:
            name: Profile name
            document: Parsed JSON object
            voxel_types: Voxel type registry used by ``Voxel(...)`` calls
            noise: Noise sampler used by ``Simplex`` fields

        Returns:
            Compiled BiomeProfile

        Raises:
            BiomeConfigError: If any part of the document cannot be compiled
        """
        if not isinstance(document, Mapping):
            raise MalformedConfigError(
                f"Profile document must be an object, got {type(document).__name__}"
            )

        compiler = FormulaCompiler(voxel_types, noise)
        compiler.bind_samplers(require_value(document, SAMPLERS_KEY, list))

        density = cls._compile(compiler.build_number, document, DENSITY_KEY)
        voxel_id = cls._compile(compiler.build_voxel_type, document, TYPE_KEY)
        shape = cls._compile(compiler.build_voxel_shape, document, SHAPE_KEY)

        profile = cls(name, density, voxel_id, shape, compiler.fields)
        logger.debug(
            f"Compiled biome profile '{name}': {len(profile.fields)} fields, "
            f"{profile.node_count()} nodes"
        )
        return profile

    @classmethod
    def from_json(cls, name: str, data: str, voxel_types, noise) -> "BiomeProfile":
        """Parse and compile a profile document given as JSON text."""
        try:
            document = json.loads(data)
        except json.JSONDecodeError as e:
            raise MalformedConfigError(f"Invalid JSON: {e}") from e
        except RecursionError:
            raise MalformedConfigError("Invalid JSON: document nested too deeply") from None
        return cls.from_document(name, document, voxel_types, noise)

    @staticmethod
    def _compile(build, document: Mapping[str, Any], key: str) -> Instruction:
        formula = require_value(document, key, str)
        try:
            return build(formula)
        except RecursionError:
            raise nesting_error(formula).with_context(field=key) from None
        except BiomeConfigError as e:
            raise e.with_context(field=key)

    def node_count(self) -> int:
        roots = [self.density_formula, self.id_formula, self.shape_formula]
        seen = set()
        for root in roots:
            seen.update(id(node) for node in iter_nodes(root))
        return len(seen)

    def sample_density(self, context: SampleContext) -> float:
        return self.density_formula.evaluate(context)

    def sample_voxel(self, context: SampleContext) -> VoxelRecord:
        voxel_id = self.id_formula.evaluate(context)
        shape = self.shape_formula.evaluate(context)
        return VoxelRecord(shape=shape, state=DEFAULT_VOXEL_STATE, id=voxel_id)

    def __repr__(self) -> str:
        return f"BiomeProfile(name={self.name!r}, fields={list(self.fields)})"
