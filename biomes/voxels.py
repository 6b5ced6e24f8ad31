"""
Voxel type lookup by name.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoxelType:
    name: str
    id: int


class VoxelTypeRegistry:
    """Maps voxel type names used in ``Voxel(...)`` calls to numeric ids."""

    def __init__(self, types: Optional[Mapping[str, int]] = None):
        self._types: Dict[str, VoxelType] = {}
        for name, voxel_id in (types or {}).items():
            self.register(name, voxel_id)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "VoxelTypeRegistry":
        """
        Build the registry from the ``voxels`` section of the configuration.

        Args:
            config: Full configuration dictionary

        Returns:
            Registry holding every entry of ``voxels.types``
        """
        types = (config.get("voxels") or {}).get("types") or {}
        registry = cls(types)
        logger.info(f"Loaded {len(registry)} voxel types")
        return registry

    def register(self, name: str, voxel_id: int) -> VoxelType:
        if name in self._types:
            raise ValueError(f"Voxel type '{name}' is already registered")
        if not 0 <= int(voxel_id) <= 0xFFFF:
            raise ValueError(f"Voxel id for '{name}' out of range: {voxel_id}")
        voxel = VoxelType(name=name, id=int(voxel_id))
        self._types[name] = voxel
        return voxel

    def get_voxel_by_name(self, name: str) -> Optional[VoxelType]:
        return self._types.get(name)

    def names(self) -> List[str]:
        return sorted(self._types)

    def __len__(self) -> int:
        return len(self._types)
