"""Nearest spawn point lookup.

A plain linear scan over a territory's spawn points. Territories hold tens of
points and this runs once per mob per generated link, so no spatial index.
"""

from typing import Mapping, Optional

from huntdata.turtle_data import TurtleMapData


def _distance_squared(a, b) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return dx * dx + dy * dy


def nearest_spawn_point(spawn_points: Mapping[int, tuple[float, float]], position) -> Optional[int]:
    '''
    Returns the id of the spawn point closest to position, or None if there are no points.
    Equidistant points resolve to the one that comes first in iteration order.

    :param spawn_points: Spawn point id -> (x, y).
    :param position: Query (x, y).
    '''
    nearest_id = None
    nearest_distance = None
    for point_id, point in spawn_points.items():
        distance = _distance_squared(point, position)
        if nearest_distance is None or distance < nearest_distance:
            nearest_id = point_id
            nearest_distance = distance
    return nearest_id


def nearest_spawn_point_for(
    territories: Mapping[int, TurtleMapData],
    territory_id: int,
    position,
) -> Optional[int]:
    """Nearest spawn point in a territory, None when the territory is unknown."""
    map_data = territories.get(territory_id)
    if map_data is None:
        return None
    return nearest_spawn_point(map_data.spawn_points, position)
