#!/usr/bin/env python3
"""
Biome CLI - load, check and sample biome profiles

This script drives the biome engine from the command line:
1. list: load every profile and print its name
2. validate: load every profile and fail if any of them does not compile
3. sample: evaluate one profile over a patch of voxels and save it as .npz

Usage:
    python sample_biomes.py --config config.yaml --action [list|validate|sample]
    python sample_biomes.py --action sample --biome plains --origin 0 48 0 --size 16
    python sample_biomes.py --help
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from biomes.climate import ClimateField
from biomes.config import biome_settings, load_config
from biomes.errors import BiomeLoadError
from biomes.noise import NoiseSampler
from biomes.registry import BiomeRegistry, load_biomes
from biomes.sampling import get_patch_filename, sample_patch, save_patch_npz
from biomes.voxels import VoxelTypeRegistry


def setup_logging(log_level: str = "INFO") -> None:
    """Configure logging for the biome tools."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def build_registry(config: Dict[str, Any], strict: Optional[bool] = None) -> BiomeRegistry:
    """Load every biome profile named by the configuration."""
    settings = biome_settings(config)
    if strict is None:
        strict = settings["strict"]
    return load_biomes(
        settings["profile_dir"],
        VoxelTypeRegistry.from_config(config),
        NoiseSampler(seed=settings["seed"]),
        strict=strict,
    )


def list_biomes(config: Dict[str, Any]) -> None:
    registry = build_registry(config)
    for name in registry.names():
        print(name)


def validate_biomes(config: Dict[str, Any]) -> None:
    """Compile every profile; raises BiomeLoadError listing all failures."""
    logger = logging.getLogger(__name__)
    registry = build_registry(config, strict=True)
    logger.info(f"All {len(registry)} biome profiles compiled")


def sample_biome(
    config: Dict[str, Any],
    biome: str,
    origin: Tuple[int, int, int],
    size: int,
    output_dir: Optional[Path] = None,
) -> Path:
    """Sample one biome over a patch and save the result."""
    logger = logging.getLogger(__name__)
    registry = build_registry(config)

    profile = registry.get_biome_by_name(biome)
    if profile is None:
        raise KeyError(f"Unknown biome '{biome}', available: {', '.join(registry.names())}")

    climate = ClimateField.from_config(config, seed=biome_settings(config)["seed"])
    patch = sample_patch(profile, climate, origin, size)

    if output_dir is None:
        output_dir = Path((config.get("sampling") or {}).get("output_dir") or "data/samples")
    output_path = save_patch_npz(patch, get_patch_filename(biome, origin, output_dir))

    logger.info(
        f"Sampled '{biome}' at {origin}: density range "
        f"[{patch['density'].min():.3f}, {patch['density'].max():.3f}], saved to {output_path}"
    )
    return output_path


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="Biome profile tools")
    parser.add_argument(
        "--config", type=Path, default="config.yaml", help="Path to config YAML file"
    )
    parser.add_argument(
        "--action",
        choices=["list", "validate", "sample"],
        required=True,
        help="Action to perform",
    )
    parser.add_argument("--biome", help="Biome profile to sample")
    parser.add_argument(
        "--origin",
        type=int,
        nargs=3,
        default=[0, 0, 0],
        metavar=("X", "Y", "Z"),
        help="Lowest corner of the sampled patch",
    )
    parser.add_argument("--size", type=int, default=16, help="Patch edge length")
    parser.add_argument("--output", type=Path, help="Directory for sampled patches")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    args = parser.parse_args(argv)

    # Setup logging
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    # Load configuration
    try:
        config = load_config(args.config)
        logger.info(f"Loaded configuration from {args.config}")
    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        return 1

    # Execute requested action
    try:
        if args.action == "list":
            list_biomes(config)
        elif args.action == "validate":
            validate_biomes(config)
        elif args.action == "sample":
            if not args.biome:
                logger.error("--biome required for sample action")
                return 1
            sample_biome(config, args.biome, tuple(args.origin), args.size, args.output)
    except BiomeLoadError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.error(f"Action '{args.action}' failed: {e}")
        return 1

    logger.info(f"Action '{args.action}' completed successfully!")
    return 0


if __name__ == "__main__":
    exit(main())
