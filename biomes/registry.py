"""
Biome registry: every biome profile of a world, loaded once and then only read.

Profiles are loaded from a directory of JSON documents; each profile is named
after its file (``desert.json`` becomes ``desert``). A document that fails to
load is reported and skipped, and the rest of the directory still loads.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Union

from biomes.errors import BiomeConfigError, BiomeLoadError, MalformedConfigError
from biomes.profile import BiomeProfile

logger = logging.getLogger(__name__)

PROFILE_SUFFIX = ".json"


class BiomeRegistry:
    """Read-only mapping of profile name to BiomeProfile."""

    def __init__(
        self,
        profiles: Mapping[str, BiomeProfile],
        failures: Optional[Mapping[str, BiomeConfigError]] = None,
    ):
        self._profiles: Dict[str, BiomeProfile] = dict(profiles)
        self.failures: Dict[str, BiomeConfigError] = dict(failures or {})

    def get_biome_by_name(self, name: str) -> Optional[BiomeProfile]:
        return self._profiles.get(name)

    def names(self) -> List[str]:
        return sorted(self._profiles)

    def __contains__(self, name: object) -> bool:
        return name in self._profiles

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._profiles)


def load_biomes(
    profile_dir: Union[str, Path],
    voxel_types,
    noise,
    strict: bool = False,
) -> BiomeRegistry:
    """
    Load every biome profile in a directory.

    Args:
        profile_dir: Directory holding one ``.json`` document per biome
        voxel_types: Voxel type registry used by ``Voxel(...)`` calls
        noise: Noise sampler used by ``Simplex`` fields
        strict: Raise once the scan is done if any profile failed

    Returns:
        BiomeRegistry with every profile that compiled; failed files are listed
        in ``registry.failures``

    Raises:
        FileNotFoundError: If the directory does not exist
        BiomeLoadError: If ``strict`` is set and at least one profile failed
    """
    profile_dir = Path(profile_dir)
    if not profile_dir.is_dir():
        raise FileNotFoundError(f"Biome profile directory not found: {profile_dir}")

    profiles: Dict[str, BiomeProfile] = {}
    failures: Dict[str, BiomeConfigError] = {}

    for path in sorted(profile_dir.glob(f"*{PROFILE_SUFFIX}")):
        name = path.stem
        try:
            profiles[name] = load_profile(path, voxel_types, noise)
        except BiomeConfigError as e:
            failures[path.name] = e
            logger.error(f"Failed to load biome profile '{name}': {e}")
            continue

        logger.info(f"Loaded biome profile '{name}' from {path}")

    if failures:
        logger.warning(
            f"Loaded {len(profiles)} biome profiles, {len(failures)} failed: "
            f"{', '.join(sorted(failures))}"
        )
        if strict:
            raise BiomeLoadError(failures)
    else:
        logger.info(f"Loaded {len(profiles)} biome profiles from {profile_dir}")

    return BiomeRegistry(profiles, failures)


def load_profile(path: Path, voxel_types, noise) -> BiomeProfile:
    """Read and compile a single profile document, tagging errors with its file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = f.read()
    except OSError as e:
        raise MalformedConfigError(f"Could not read profile: {e}", file=path.name) from e
    except UnicodeDecodeError as e:
        raise MalformedConfigError(f"Profile is not valid UTF-8: {e}", file=path.name) from e

    try:
        return BiomeProfile.from_json(path.stem, data, voxel_types, noise)
    except BiomeConfigError as e:
        raise e.with_context(file=path.name)


class LazyBiomeRegistry:
    """
    Registry that is built on first use.

    The loader runs exactly once, even when several threads ask for the
    registry at the same time; every caller gets the same registry object.
    If the loader raises, the error propagates and the next call retries.
    """

    def __init__(self, loader: Callable[[], BiomeRegistry]):
        self._loader = loader
        self._lock = threading.Lock()
        self._registry: Optional[BiomeRegistry] = None

    @property
    def loaded(self) -> bool:
        return self._registry is not None

    def get(self) -> BiomeRegistry:
        registry = self._registry
        if registry is None:
            with self._lock:
                if self._registry is None:
                    self._registry = self._loader()
                registry = self._registry
        return registry

    def get_biome_by_name(self, name: str) -> Optional[BiomeProfile]:
        return self.get().get_biome_by_name(name)
