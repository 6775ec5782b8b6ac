"""Height field synthesis from the configured noise function."""

from collections.abc import Callable

import numpy as np
import structlog
from numpy.typing import NDArray

from .config import NoiseConfig, NoiseKind
from .noise import perlin_noise, simplex_noise, worley_noise

logger = structlog.get_logger()

NoiseSampler = Callable[[NDArray[np.float64], NDArray[np.float64], int], NDArray[np.float64]]

# Gradient kinds return [-1, 1] and are remapped; cell distance is used as-is
_SAMPLERS: dict[NoiseKind, tuple[NoiseSampler, bool]] = {
    NoiseKind.PERLIN: (perlin_noise, True),
    NoiseKind.SIMPLEX: (simplex_noise, True),
    NoiseKind.WORLEY: (worley_noise, False),
}


def sample_coordinates(
    width: int,
    height: int,
    config: NoiseConfig,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Noise-space sample coordinates for every column and row.

    Args:
        width: Map width in tiles.
        height: Map height in tiles.
        config: Noise parameters (offset and scale).

    Returns:
        Tuple of (xs, ys) 1D coordinate arrays.
    """
    xs = (np.arange(width, dtype=np.float64) + config.offset_x) / config.scale
    ys = (np.arange(height, dtype=np.float64) + config.offset_y) / config.scale
    return xs, ys


def make_height_field(
    width: int,
    height: int,
    config: NoiseConfig,
    seed: int = 0,
) -> NDArray[np.float64]:
    """Generate the height field.

    Samples the configured noise at ((x + offset_x) / scale,
    (y + offset_y) / scale) for every cell, normalizes gradient noise
    from [-1, 1] to [0, 1] and clamps the result to [0, 1].

    Args:
        width: Map width in tiles.
        height: Map height in tiles.
        config: Noise parameters.
        seed: Noise seed.

    Returns:
        2D height array of shape (height, width) in range [0, 1].
    """
    sampler, remap = _SAMPLERS[config.kind]
    xs, ys = sample_coordinates(width, height, config)

    values = sampler(xs, ys, seed)
    if remap:
        values = (values + 1.0) / 2.0

    field = np.clip(values, 0.0, 1.0).astype(np.float64)
    field.setflags(write=False)

    logger.debug(
        "height_field_generated",
        kind=config.kind.value,
        width=width,
        height=height,
        min=float(field.min()) if field.size else None,
        max=float(field.max()) if field.size else None,
    )
    return field
