"""River carving: walks from mountain peaks down to their nearest lake bottom.

Each walk heads for its target lake along one of 8 compass bearings and,
at every step, picks the lowest cell of a three-cell fan around that
bearing. Rivers are carved one after another and claim cells in a shared
occupancy grid, so an earlier river diverts later ones.
"""

from dataclasses import dataclass, field

import numpy as np
import structlog
from numpy.typing import NDArray

from ..exceptions import RiverWalkError
from ..types import Direction, Position
from .config import FanSelection, RiverConfig

logger = structlog.get_logger()

# Bearing first, then its counter-clockwise and clockwise neighbours
BEARING_FANS: dict[Direction, tuple[Direction, Direction, Direction]] = {
    direction: (direction, direction.rotated(-1), direction.rotated(1))
    for direction in Direction
}


@dataclass
class River:
    """A carved (or abandoned) river."""

    source: Position
    target: Position
    path: list[Position] = field(default_factory=list)  # Carved cells, source excluded
    completed: bool = False
    failure_reason: str | None = None


def nearest_lake(source: Position, lake_bottoms: list[Position]) -> Position | None:
    """Closest lake bottom by Euclidean distance.

    Ties keep the first lake encountered.

    Returns:
        The nearest lake bottom, or None if there are none.
    """
    closest: Position | None = None
    closest_distance = float("inf")

    for lake in lake_bottoms:
        distance = source.distance_to(lake)
        if distance < closest_distance:
            closest_distance = distance
            closest = lake

    return closest


def choose_bearing(dx: float, dy: float, coefficient: float) -> Direction:
    """Pick the compass bearing toward a target offset.

    An axis dominates when its component, scaled down by the bias
    coefficient, still exceeds the other component; otherwise the
    diagonal matching the signs of dx and dy is used.

    Args:
        dx: Target x minus current x.
        dy: Target y minus current y (+y is south).
        coefficient: Bias coefficient, typically in [0.5, 0.8].

    Returns:
        One of the 8 directions.
    """
    if abs(dx * coefficient) > abs(dy):
        return Direction.EAST if dx > 0 else Direction.WEST
    if abs(dy * coefficient) > abs(dx):
        return Direction.SOUTH if dy > 0 else Direction.NORTH

    if dy > 0:
        return Direction.SOUTHEAST if dx > 0 else Direction.SOUTHWEST
    return Direction.NORTHEAST if dx > 0 else Direction.NORTHWEST


def _is_free(cell: Position, occupancy: NDArray[np.bool_]) -> bool:
    height, width = occupancy.shape
    return cell.within(width, height) and not occupancy[cell.y, cell.x]


def _select_symmetric(
    candidates: list[Position],
    height_field: NDArray[np.float64],
    occupancy: NDArray[np.bool_],
) -> Position | None:
    """Lowest free candidate; ties go to the earliest fan entry."""
    free = [cell for cell in candidates if _is_free(cell, occupancy)]
    if not free:
        return None
    return min(free, key=lambda cell: height_field[cell.y, cell.x])


def _select_center_biased(
    candidates: list[Position],
    height_field: NDArray[np.float64],
    occupancy: NDArray[np.bool_],
) -> Position | None:
    """Bearing cell unless a free flank is strictly lower.

    An occupied or off-map bearing cell sets no baseline, so any free
    flank replaces it.
    """
    chosen: Position | None = None
    chosen_height = float("inf")
    if _is_free(candidates[0], occupancy):
        chosen = candidates[0]
        chosen_height = height_field[chosen.y, chosen.x]

    for cell in candidates[1:]:
        if _is_free(cell, occupancy) and height_field[cell.y, cell.x] < chosen_height:
            chosen = cell
            chosen_height = height_field[cell.y, cell.x]

    return chosen


_SELECTORS = {
    FanSelection.SYMMETRIC: _select_symmetric,
    FanSelection.CENTER_BIASED: _select_center_biased,
}


def next_cell(
    current: Position,
    target: Position,
    height_field: NDArray[np.float64],
    occupancy: NDArray[np.bool_],
    config: RiverConfig,
) -> Position | None:
    """Choose the next river cell from the bearing fan.

    Returns:
        The chosen cell, or None if the fan offers no usable cell.
    """
    bearing = choose_bearing(target.x - current.x, target.y - current.y, config.bias_coefficient)
    candidates = [current.offset(direction) for direction in BEARING_FANS[bearing]]
    return _SELECTORS[config.fan_selection](candidates, height_field, occupancy)


def walk_river(
    source: Position,
    target: Position,
    height_field: NDArray[np.float64],
    occupancy: NDArray[np.bool_],
    swamp_threshold: float,
    config: RiverConfig,
    max_steps: int,
) -> River:
    """Walk one river from a peak toward its target lake.

    Every cell entered at or above the swamp threshold is claimed in the
    occupancy grid and appended to the path. The walk ends on the first
    cell below the swamp threshold, which is left unclaimed.

    Args:
        source: Peak the river starts from (never claimed).
        target: Lake bottom the river heads for.
        height_field: 2D height array indexed [y, x].
        occupancy: Occupancy grid, mutated in place.
        swamp_threshold: Height below which the walk stops.
        config: River configuration.
        max_steps: Step cap for this walk.

    Returns:
        The completed River.

    Raises:
        RiverWalkError: If the walk is blocked or exceeds max_steps. Cells
            claimed by this walk are released before raising.
    """
    path: list[Position] = []
    current = source

    try:
        for _ in range(max_steps):
            step = next_cell(current, target, height_field, occupancy, config)
            if step is None:
                raise RiverWalkError(source, f"blocked at {current}")

            if height_field[step.y, step.x] < swamp_threshold:
                return River(source=source, target=target, path=path, completed=True)

            occupancy[step.y, step.x] = True
            path.append(step)
            current = step

        raise RiverWalkError(source, f"exceeded {max_steps} steps")
    except RiverWalkError:
        for cell in path:
            occupancy[cell.y, cell.x] = False
        raise


def carve_rivers(
    height_field: NDArray[np.float64],
    occupancy: NDArray[np.bool_],
    peaks: list[Position],
    lake_bottoms: list[Position],
    swamp_threshold: float,
    config: RiverConfig,
) -> tuple[set[Position], list[River]]:
    """Carve one river per peak, in peak order.

    A river that cannot be completed is abandoned and logged; the
    remaining peaks are still processed.

    Args:
        height_field: 2D height array indexed [y, x].
        occupancy: Occupancy grid, mutated in place.
        peaks: River sources, in processing order.
        lake_bottoms: River sinks.
        swamp_threshold: Height below which a walk stops.
        config: River configuration.

    Returns:
        Tuple of (set of river cells, list of River objects).
    """
    river_cells: set[Position] = set()
    rivers: list[River] = []

    if not lake_bottoms:
        logger.info("no_lake_bottoms", peaks=len(peaks))
        return river_cells, rivers

    max_steps = config.max_steps if config.max_steps is not None else height_field.size

    for peak in peaks:
        target = nearest_lake(peak, lake_bottoms)

        try:
            river = walk_river(
                peak,
                target,
                height_field,
                occupancy,
                swamp_threshold,
                config,
                max_steps,
            )
        except RiverWalkError as e:
            logger.warning(
                "river_abandoned",
                peak=str(peak),
                target=str(target),
                reason=e.reason,
            )
            rivers.append(
                River(source=peak, target=target, completed=False, failure_reason=e.reason)
            )
            continue

        river_cells.update(river.path)
        rivers.append(river)
        logger.debug("river_carved", peak=str(peak), target=str(target), length=len(river.path))

    completed = sum(1 for river in rivers if river.completed)
    logger.info(
        "rivers_carved",
        completed=completed,
        abandoned=len(rivers) - completed,
        cells=len(river_cells),
    )
    return river_cells, rivers
