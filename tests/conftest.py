"""Shared test fixtures for map generation tests."""

import numpy as np
import pytest
import structlog
from numpy.typing import NDArray

from biomemap.terrain.config import BiomeConfig, MapConfig, NoiseConfig


@pytest.fixture
def biome_config() -> BiomeConfig:
    """Default tiers: forest 0.6, swamp 0.35, four variants each."""
    return BiomeConfig()


@pytest.fixture
def small_config() -> MapConfig:
    """32x32 Perlin map with default biomes."""
    return MapConfig(width=32, height=32, seed=7, noise=NoiseConfig(scale=6.0))


@pytest.fixture
def flat_field() -> NDArray[np.float64]:
    """8x6 field where every cell has height 0.5."""
    return np.full((6, 8), 0.5, dtype=np.float64)


@pytest.fixture
def valley_field() -> NDArray[np.float64]:
    """7x6 valley draining down column 3 into a basin at (3, 5).

    Heights rise 0.05 per column away from x=3 and 0.01 per row away
    from the bottom edge. Only the basin lies below 0.35.
    """
    xs, ys = np.meshgrid(np.arange(7), np.arange(6))
    field = 0.4 + 0.05 * np.abs(xs - 3) + 0.01 * (5 - ys)
    field[5, 3] = 0.0
    return field.astype(np.float64)


@pytest.fixture
def reset_structlog():
    """Restore structlog defaults after a test that configures it."""
    yield
    structlog.reset_defaults()
