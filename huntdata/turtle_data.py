"""Loader and validator for the Turtle dataset.

The dataset is keyed by patch name. Each patch lists the mobs Turtle tracks
(mob name -> Turtle mob id) and the maps it knows about (map name -> Turtle map
id plus named spawn points). Names are resolved into local game ids through the
two resolvers handed to load_turtle_data(). Unknown names are soft errors: they
are collected, logged once the whole file has been read, and the entry is left
out. Anything wrong with the file itself is fatal.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from huntdata.patches import Patch, parse_patch

logger = logging.getLogger(__name__)

Resolver = Callable[[str], Optional[int]]


class TurtleDataError(Exception):
    """Raised when the Turtle dataset is missing, unreadable or malformed."""


@dataclass(frozen=True)
class MobEntry:
    patch: Patch
    turtle_mob_id: int


@dataclass(frozen=True)
class TurtleMapData:
    turtle_id: int
    spawn_points: Mapping[int, tuple[float, float]]


@dataclass(frozen=True)
class TurtleData:
    """Read-only lookup tables plus the soft errors collected while building them."""

    mobs: Mapping[int, MobEntry]
    territories: Mapping[int, TurtleMapData]
    errors: tuple[str, ...] = field(default_factory=tuple)

    def summary(self) -> dict:
        return {
            "mobs": len(self.mobs),
            "territories": len(self.territories),
            "spawn_points": sum(len(t.spawn_points) for t in self.territories.values()),
            "errors": len(self.errors),
        }


## ---------------------------- Structure checks ---------------------------- ##
def _require_mapping(value, where: str) -> dict:
    if not isinstance(value, dict):
        raise TurtleDataError(f"Expected an object for {where}, got {type(value).__name__}")
    return value


def _require_id(value, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise TurtleDataError(f"Expected a non-negative integer id for {where}, got {value!r}")
    return value


def _require_coordinate(value, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TurtleDataError(f"Expected a number for {where}, got {value!r}")
    return float(value)


def _parse_points(points, map_name: str) -> Mapping[int, tuple[float, float]]:
    parsed = {}
    for point_key, coords in _require_mapping(points, f"points of map '{map_name}'").items():
        where = f"spawn point '{point_key}' of map '{map_name}'"
        try:
            point_id = int(point_key)
        except ValueError:
            raise TurtleDataError(f"Spawn point ids must be integers, got '{point_key}' in map '{map_name}'") from None
        coords = _require_mapping(coords, where)
        if "x" not in coords or "y" not in coords:
            raise TurtleDataError(f"Missing x/y for {where}")
        parsed[point_id] = (
            _require_coordinate(coords["x"], f"x of {where}"),
            _require_coordinate(coords["y"], f"y of {where}"),
        )
    return MappingProxyType(parsed)


## ---------------------------- Per-patch parsing ---------------------------- ##
def _parse_patch_data(patch_key, patch_data, resolve_mob_id: Resolver, resolve_territory_id: Resolver):
    '''
    Resolves one patch's mobs and maps. Returns (mobs, territories, errors) where
    errors lists the names that could not be resolved.
    '''
    try:
        patch = parse_patch(patch_key)
    except ValueError as e:
        raise TurtleDataError(str(e)) from None

    patch_data = _require_mapping(patch_data, f"patch '{patch_key}'")
    patch_mobs = _require_mapping(patch_data.get("mobs", {}), f"mobs of patch '{patch_key}'")
    patch_maps = _require_mapping(patch_data.get("maps", {}), f"maps of patch '{patch_key}'")

    mobs = {}
    territories = {}
    errors = []

    for mob_name, turtle_mob_id in patch_mobs.items():
        turtle_mob_id = _require_id(turtle_mob_id, f"mob '{mob_name}'")
        mob_id = resolve_mob_id(mob_name)
        if mob_id is None:
            errors.append(f"No mobId found for mobName: {mob_name}")
            continue
        mobs[mob_id] = MobEntry(patch, turtle_mob_id)

    for map_name, map_data in patch_maps.items():
        map_data = _require_mapping(map_data, f"map '{map_name}'")
        if "id" not in map_data:
            raise TurtleDataError(f"Missing id for map '{map_name}'")
        turtle_map_id = _require_id(map_data["id"], f"map '{map_name}'")
        spawn_points = _parse_points(map_data.get("points", {}), map_name)
        territory_id = resolve_territory_id(map_name)
        if territory_id is None:
            errors.append(f"No mapId found for mapName: {map_name}")
            continue
        territories[territory_id] = TurtleMapData(turtle_map_id, spawn_points)

    return mobs, territories, errors


def _merge(target: dict, source: dict, kind: str, owner: dict, patch_key: str) -> None:
    # Later patches win. Collisions are flagged since they usually mean a data error.
    for key, value in source.items():
        if key in target and target[key] != value:
            logger.warning(
                "%s id %s appears in patch %s and %s; keeping the %s entry.",
                kind, key, owner[key], patch_key, patch_key,
            )
        target[key] = value
        owner[key] = patch_key


## ---------------------------- Loader ---------------------------- ##
def read_turtle_json(data_file_path) -> dict:
    '''
    Reads the raw dataset document.

    :raises TurtleDataError: If the file is missing or is not a JSON object.
    '''
    path = Path(data_file_path)
    if not path.exists():
        raise TurtleDataError(f"Can't find {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise TurtleDataError(f"Failed to read Turtle data from {path}: {e}") from e
    if not isinstance(data, dict):
        raise TurtleDataError(f"Failed to read Turtle data from {path}: expected an object keyed by patch")
    return data


def load_turtle_data(data_file_path, resolve_mob_id: Resolver, resolve_territory_id: Resolver) -> TurtleData:
    '''
    Loads the Turtle dataset and builds the mob and territory lookup tables.

    Unresolvable mob or map names are collected as soft errors, logged after the
    full pass and skipped. Entries for the same local id in several patches are
    merged with the last patch winning.

    :param data_file_path: Path of the JSON dataset.
    :param resolve_mob_id: Maps a mob name to its local mob id, or None.
    :param resolve_territory_id: Maps a map name to its local territory id, or None.
    :raises TurtleDataError: If the file is missing, unparseable or has an unknown patch key.
    '''
    logger.debug("Loading Turtle data...")
    data = read_turtle_json(data_file_path)

    mobs = {}
    territories = {}
    mob_owner = {}
    territory_owner = {}
    errors = []
    for patch_key, patch_data in data.items():
        patch_mobs, patch_territories, patch_errors = _parse_patch_data(
            patch_key, patch_data, resolve_mob_id, resolve_territory_id
        )
        _merge(mobs, patch_mobs, "Mob", mob_owner, patch_key)
        _merge(territories, patch_territories, "Territory", territory_owner, patch_key)
        errors.extend(patch_errors)

    for error in errors:
        logger.error(error)

    logger.debug("Loaded Turtle data: %d mobs, %d territories.", len(mobs), len(territories))
    return TurtleData(
        mobs=MappingProxyType(mobs),
        territories=MappingProxyType(territories),
        errors=tuple(errors),
    )
