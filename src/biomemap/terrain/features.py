"""Peak and lake-bottom detection on the height field."""

from dataclasses import dataclass, field

import numpy as np
import structlog
from numpy.typing import NDArray
from scipy import ndimage

from ..types import Position

logger = structlog.get_logger()

# 8-neighbourhood plus the cell itself
_WINDOW = np.ones((3, 3), dtype=bool)


@dataclass
class Features:
    """River sources and sinks found on a height field."""

    peaks: list[Position] = field(default_factory=list)
    lake_bottoms: list[Position] = field(default_factory=list)


def mountain_band(forest_threshold: float, top_intra_threshold: float) -> float:
    """Height above which a local maximum counts as a peak.

    This is the lower edge of the highest forest variant.
    """
    return top_intra_threshold * (1.0 - forest_threshold) + forest_threshold


def local_maxima(height_field: NDArray[np.float64]) -> NDArray[np.bool_]:
    """Cells with no in-bounds 8-neighbour strictly higher."""
    neighbourhood_max = ndimage.maximum_filter(
        height_field, footprint=_WINDOW, mode="constant", cval=-np.inf
    )
    return height_field >= neighbourhood_max


def local_minima(height_field: NDArray[np.float64]) -> NDArray[np.bool_]:
    """Cells with no in-bounds 8-neighbour strictly lower."""
    neighbourhood_min = ndimage.minimum_filter(
        height_field, footprint=_WINDOW, mode="constant", cval=np.inf
    )
    return height_field <= neighbourhood_min


def _positions_x_major(mask: NDArray[np.bool_]) -> list[Position]:
    """Positions of True cells, x outer and y inner."""
    return [Position(x=int(x), y=int(y)) for x, y in np.argwhere(mask.T)]


def detect_features(
    height_field: NDArray[np.float64],
    forest_threshold: float,
    swamp_threshold: float,
    top_intra_threshold: float,
) -> Features:
    """Find mountain peaks and lake bottoms.

    A peak is a local maximum at or above the mountain band; a lake
    bottom is a local minimum strictly below the swamp threshold.
    Plateaus produce one entry per plateau cell.

    Args:
        height_field: 2D height array indexed [y, x].
        forest_threshold: Lower bound of the forest tier.
        swamp_threshold: Lower bound of the swamp tier.
        top_intra_threshold: First (highest) intra-biome threshold.

    Returns:
        Features with peaks and lake bottoms in x-major scan order.
    """
    if height_field.size == 0:
        return Features()

    band = mountain_band(forest_threshold, top_intra_threshold)

    peak_mask = (height_field >= band) & local_maxima(height_field)
    lake_mask = (height_field < swamp_threshold) & local_minima(height_field)

    features = Features(
        peaks=_positions_x_major(peak_mask),
        lake_bottoms=_positions_x_major(lake_mask),
    )

    logger.info(
        "features_detected",
        mountain_band=round(band, 4),
        peaks=len(features.peaks),
        lake_bottoms=len(features.lake_bottoms),
    )
    return features
