"""Noise functions for height field synthesis.

Each sampler takes 1D sample coordinates along x and y and returns a
2D grid of shape (len(ys), len(xs)) indexed [y, x]. All samplers are
pure functions of their coordinates and seed.
"""

import numpy as np
from numpy.typing import NDArray
from opensimplex import OpenSimplex

# Gradient set for 2D Perlin noise: diagonals then axes
_PERLIN_GRADIENTS = np.array(
    [[1, 1], [-1, 1], [1, -1], [-1, -1], [1, 0], [-1, 0], [0, 1], [0, -1]],
    dtype=np.float64,
)

# Mixing constants from the MurmurHash3 64-bit finalizer
_MIX_1 = np.uint64(0xFF51AFD7ED558CCD)
_MIX_2 = np.uint64(0xC4CEB9FE1A85EC53)
_HASH_X = np.uint64(0x9E3779B97F4A7C15)
_HASH_Y = np.uint64(0xC2B2AE3D27D4EB4F)
_HASH_SEED = 0x165667B19E3779F9
_UINT64_MASK = 0xFFFFFFFFFFFFFFFF


def _fade(t: NDArray[np.float64]) -> NDArray[np.float64]:
    """Perlin's quintic smoothing curve 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _lerp(a: NDArray[np.float64], b: NDArray[np.float64], t: NDArray[np.float64]) -> NDArray[np.float64]:
    return a + t * (b - a)


def _permutation_table(seed: int) -> NDArray[np.int64]:
    """Build the doubled 512-entry permutation table for a seed."""
    rng = np.random.default_rng(seed)
    perm = rng.permutation(256).astype(np.int64)
    return np.concatenate([perm, perm])


def _gradient_dot(
    hashes: NDArray[np.int64],
    dx: NDArray[np.float64],
    dy: NDArray[np.float64],
) -> NDArray[np.float64]:
    gradients = _PERLIN_GRADIENTS[hashes & 7]
    return gradients[..., 0] * dx + gradients[..., 1] * dy


def perlin_noise(
    xs: NDArray[np.float64],
    ys: NDArray[np.float64],
    seed: int = 0,
) -> NDArray[np.float64]:
    """Classic 2D gradient (Perlin) noise.

    Args:
        xs: Sample coordinates along x.
        ys: Sample coordinates along y.
        seed: Seed for the permutation table.

    Returns:
        2D array of shape (len(ys), len(xs)), roughly in [-1, 1].
    """
    perm = _permutation_table(seed)
    x_grid, y_grid = np.meshgrid(np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64))

    x_floor = np.floor(x_grid)
    y_floor = np.floor(y_grid)
    xi = x_floor.astype(np.int64) & 255
    yi = y_floor.astype(np.int64) & 255
    xf = x_grid - x_floor
    yf = y_grid - y_floor

    u = _fade(xf)
    v = _fade(yf)

    # Hash the four lattice corners
    aa = perm[perm[xi] + yi]
    ab = perm[perm[xi] + yi + 1]
    ba = perm[perm[xi + 1] + yi]
    bb = perm[perm[xi + 1] + yi + 1]

    bottom = _lerp(_gradient_dot(aa, xf, yf), _gradient_dot(ba, xf - 1.0, yf), u)
    top = _lerp(_gradient_dot(ab, xf, yf - 1.0), _gradient_dot(bb, xf - 1.0, yf - 1.0), u)

    return _lerp(bottom, top, v)


def simplex_noise(
    xs: NDArray[np.float64],
    ys: NDArray[np.float64],
    seed: int = 0,
) -> NDArray[np.float64]:
    """2D OpenSimplex noise.

    Args:
        xs: Sample coordinates along x.
        ys: Sample coordinates along y.
        seed: OpenSimplex seed.

    Returns:
        2D array of shape (len(ys), len(xs)), in [-1, 1].
    """
    simplex = OpenSimplex(seed=seed)
    result = simplex.noise2array(
        np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)
    )
    return np.asarray(result, dtype=np.float64)


def _hash_cells(cx: NDArray[np.int64], cy: NDArray[np.int64], seed: int) -> NDArray[np.uint64]:
    """Hash integer lattice cells to 64 well-mixed bits."""
    hx = cx.astype(np.int64).view(np.uint64)
    hy = cy.astype(np.int64).view(np.uint64)
    seed_bits = np.uint64((seed * _HASH_SEED) & _UINT64_MASK)
    h = hx * _HASH_X ^ hy * _HASH_Y ^ seed_bits

    h ^= h >> np.uint64(33)
    h *= _MIX_1
    h ^= h >> np.uint64(33)
    h *= _MIX_2
    h ^= h >> np.uint64(33)
    return h


def worley_noise(
    xs: NDArray[np.float64],
    ys: NDArray[np.float64],
    seed: int = 0,
) -> NDArray[np.float64]:
    """Cellular (Worley) F1 noise.

    Each unit lattice cell holds one feature point at a hashed jitter
    inside the cell. The result is the distance from every sample to
    its nearest feature point. Points more than two cells away are always
    farther than the point in the sample's own cell, so a 5x5 search is exact.

    Args:
        xs: Sample coordinates along x.
        ys: Sample coordinates along y.
        seed: Seed mixed into the lattice hash.

    Returns:
        2D array of shape (len(ys), len(xs)) of non-negative distances.
    """
    x_grid, y_grid = np.meshgrid(np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64))
    cell_x = np.floor(x_grid).astype(np.int64)
    cell_y = np.floor(y_grid).astype(np.int64)

    nearest = np.full(x_grid.shape, np.inf, dtype=np.float64)

    for oy in range(-2, 3):
        for ox in range(-2, 3):
            cx = cell_x + ox
            cy = cell_y + oy
            h = _hash_cells(cx, cy, seed)

            # Low and high 32 bits give the jitter along x and y
            jitter_x = (h & np.uint64(0xFFFFFFFF)).astype(np.float64) / 4294967296.0
            jitter_y = (h >> np.uint64(32)).astype(np.float64) / 4294967296.0

            dist = np.hypot(cx + jitter_x - x_grid, cy + jitter_y - y_grid)
            np.minimum(nearest, dist, out=nearest)

    return nearest
