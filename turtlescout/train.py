"""Projection of recorded hunt trains into Turtle request bodies."""

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from huntdata.patches import Patch
from huntdata.spawn_points import nearest_spawn_point_for
from huntdata.turtle_data import MobEntry, TurtleMapData

logger = logging.getLogger(__name__)

NO_SUPPORTED_MOBS_MESSAGE = "No mobs supported by Turtle Scouter were found in the Hunt Helper train recorder ;-;"


class NoSupportedMobsError(Exception):
    """Raised when a link is requested for a train with no mobs Turtle tracks."""

    def __init__(self, message: str = NO_SUPPORTED_MOBS_MESSAGE):
        super().__init__(message)


@dataclass(frozen=True)
class TrainMob:
    mob_id: int
    territory_id: int
    instance: Optional[int]
    position: tuple[float, float]

    @classmethod
    def from_json(cls, item: dict) -> "TrainMob":
        return cls(
            mob_id=int(item["mob_id"]),
            territory_id=int(item["territory_id"]),
            instance=None if item.get("instance") is None else int(item["instance"]),
            position=(float(item["x"]), float(item["y"])),
        )


def as_turtle_instance(instance: Optional[int]) -> int:
    # Turtle numbers instances from 1 and has no "no instance" value.
    if not instance:
        return 1
    return instance


def supported_mobs(train: Iterable[TrainMob], mobs: Mapping[int, MobEntry]) -> list[TrainMob]:
    return [mob for mob in train if mob.mob_id in mobs]


def build_update_payload(
    train: Iterable[TrainMob],
    mobs: Mapping[int, MobEntry],
    territories: Mapping[int, TurtleMapData],
    password: str,
    player_tag: Optional[str] = None,
) -> Optional[dict]:
    '''
    Builds the body of a session update (PATCH) request.
    Returns None when no mob in the train can be sent, in which case no request should be made.

    :param train: Mobs recorded in game.
    :param mobs: Local mob id -> MobEntry.
    :param territories: Local territory id -> TurtleMapData.
    :param password: Collaborator password of the session.
    :param player_tag: Optional name@world of the updating player.
    '''
    sightings = []
    for mob in supported_mobs(train, mobs):
        map_data = territories.get(mob.territory_id)
        if map_data is None:
            logger.debug("Skipping mob %s, territory %s is unknown to Turtle.", mob.mob_id, mob.territory_id)
            continue
        sightings.append({
            "zone_id": map_data.turtle_id,
            "instance_number": as_turtle_instance(mob.instance),
            "mob_id": mobs[mob.mob_id].turtle_mob_id,
            "x": mob.position[0],
            "y": mob.position[1],
        })

    if not sightings:
        return None

    payload = {"collaborator_password": password, "sightings": sightings}
    if player_tag:
        payload["update_user"] = player_tag
    return payload


def build_generation_payload(
    train: Iterable[TrainMob],
    mobs: Mapping[int, MobEntry],
    territories: Mapping[int, TurtleMapData],
    allow_empty: bool = False,
    default_patch: Patch = Patch.DT,
) -> tuple[dict, Patch]:
    '''
    Builds the body of a new train (POST) request and the highest patch among the train's supported mobs.

    A supported mob is left out when its territory is unknown or has no spawn
    points; the rest of the train is still sent.

    :raises NoSupportedMobsError: If allow_empty is False and no mob is supported.
    '''
    supported = supported_mobs(train, mobs)
    if not supported and not allow_empty:
        raise NoSupportedMobsError()

    occurrences = []
    for mob in supported:
        map_data = territories.get(mob.territory_id)
        point_id = nearest_spawn_point_for(territories, mob.territory_id, mob.position)
        if map_data is None or point_id is None:
            logger.debug("No spawn point for mob %s in territory %s, leaving it out.", mob.mob_id, mob.territory_id)
            continue
        occurrences.append({
            "map_id": map_data.turtle_id,
            "instance_number": as_turtle_instance(mob.instance),
            "point_id": point_id,
            "mob_id": mobs[mob.mob_id].turtle_mob_id,
        })

    if supported:
        highest_patch = max(mobs[mob.mob_id].patch for mob in supported)
    else:
        highest_patch = default_patch
    return {"spawn_occurrences": occurrences}, highest_patch
