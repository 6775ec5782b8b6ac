"""CLI entry point for map generation."""

import argparse
import time
import tomllib
from pathlib import Path

import structlog
from pydantic import ValidationError

from .exceptions import ClassificationError, ConfigurationError
from .terrain.config import MapConfig, NoiseKind, load_config
from .terrain.generator import GenerationResult, generate_map


def build_parser() -> argparse.ArgumentParser:
    """Argument parser for the map generator."""
    parser = argparse.ArgumentParser(
        description="Generate a procedural biome and river tile map"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a TOML map config (defaults are used otherwise)",
    )
    parser.add_argument("--width", type=int, default=None, help="Map width (overrides config)")
    parser.add_argument("--height", type=int, default=None, help="Map height (overrides config)")
    parser.add_argument("--seed", type=int, default=None, help="Noise seed (overrides config)")
    parser.add_argument(
        "--noise",
        choices=[kind.value for kind in NoiseKind],
        default=None,
        help="Noise kind (overrides config)",
    )
    parser.add_argument("--scale", type=float, default=None, help="Noise scale (overrides config)")
    parser.add_argument(
        "--offset",
        type=float,
        nargs=2,
        metavar=("X", "Y"),
        default=None,
        help="Noise offset (overrides config)",
    )
    parser.add_argument(
        "--debug-images",
        type=str,
        default=None,
        help="Directory to save debug images (optional)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose logging"
    )
    return parser


def apply_overrides(config: MapConfig, args: argparse.Namespace) -> MapConfig:
    """Apply command-line overrides to a loaded config."""
    if args.width is not None:
        config.width = args.width
    if args.height is not None:
        config.height = args.height
    if args.seed is not None:
        config.seed = args.seed
    if args.noise is not None:
        config.noise.kind = NoiseKind(args.noise)
    if args.scale is not None:
        config.noise.scale = args.scale
    if args.offset is not None:
        config.noise.offset_x, config.noise.offset_y = args.offset
    if args.debug_images is not None:
        config.debug_output_dir = args.debug_images
    return config


def print_summary(result: GenerationResult, gen_time: float) -> None:
    """Print a short human-readable summary of a generated map."""
    config = result.config
    completed = sum(1 for river in result.rivers if river.completed)

    print(f"Generated {config.width}x{config.height} map in {gen_time:.2f}s")
    print(f"Peaks: {len(result.features.peaks)}, lake bottoms: {len(result.features.lake_bottoms)}")
    print(f"Rivers: {completed} carved, {len(result.rivers) - completed} abandoned")

    total = result.tiles.kinds.size
    for kind, count in result.tiles.counts().items():
        print(f"  {kind.value}: {count:,} ({count / total * 100:.1f}%)")

    status = "passed" if result.validation.passed else "FAILED"
    print(f"Validation {status}")


def main() -> None:
    """Run the map generator."""
    args = build_parser().parse_args()

    # Configure structlog
    level = 10 if args.verbose else 20
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )

    logger = structlog.get_logger()

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            logger.error("config_not_found", path=args.config)
            raise SystemExit(1)
        try:
            config = load_config(config_path)
        except (tomllib.TOMLDecodeError, ValidationError) as e:
            logger.error("config_invalid", path=args.config, error=str(e))
            raise SystemExit(1)
        logger.info("config_loaded", path=str(config_path))
    else:
        config = MapConfig()
        logger.info("using_default_config")

    config = apply_overrides(config, args)

    start_time = time.time()
    try:
        result = generate_map(config)
    except ConfigurationError as e:
        for problem in e.problems:
            logger.error("config_rejected", problem=problem)
        raise SystemExit(1)
    except ClassificationError as e:
        logger.error("classification_failed", x=e.x, y=e.y, height=e.height, error=str(e))
        raise SystemExit(1)
    gen_time = time.time() - start_time

    print_summary(result, gen_time)

    if not result.validation.passed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
