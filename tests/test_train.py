import pytest

from huntdata.patches import Patch
from turtlescout.train import (
    NO_SUPPORTED_MOBS_MESSAGE,
    NoSupportedMobsError,
    TrainMob,
    as_turtle_instance,
    build_generation_payload,
    build_update_payload,
    supported_mobs,
)

SUGRIVA = TrainMob(mob_id=1001, territory_id=957, instance=None, position=(19.0, 28.0))
YILAN = TrainMob(mob_id=1002, territory_id=957, instance=2, position=(11.0, 9.0))
KIRLIRGER = TrainMob(mob_id=2001, territory_id=1187, instance=0, position=(3.0, 3.0))
UNSUPPORTED = TrainMob(mob_id=9999, territory_id=957, instance=1, position=(0.0, 0.0))


@pytest.mark.parametrize("instance, expected", [(None, 1), (0, 1), (1, 1), (5, 5)])
def test_as_turtle_instance(instance, expected) -> None:
    assert as_turtle_instance(instance) == expected


def test_supported_mobs_keeps_order(turtle_data) -> None:
    train = [KIRLIRGER, UNSUPPORTED, SUGRIVA]

    assert supported_mobs(train, turtle_data.mobs) == [KIRLIRGER, SUGRIVA]


def test_update_payload_skips_unsupported_mobs(turtle_data) -> None:
    payload = build_update_payload(
        [SUGRIVA, UNSUPPORTED, YILAN], turtle_data.mobs, turtle_data.territories, "pw987"
    )

    assert payload == {
        "collaborator_password": "pw987",
        "sightings": [
            {"zone_id": 5, "instance_number": 1, "mob_id": 31, "x": 19.0, "y": 28.0},
            {"zone_id": 5, "instance_number": 2, "mob_id": 32, "x": 11.0, "y": 9.0},
        ],
    }


def test_update_payload_includes_player_tag(turtle_data) -> None:
    payload = build_update_payload([KIRLIRGER], turtle_data.mobs, turtle_data.territories, "pw", "Hunter Name@Gilgamesh")

    assert payload["update_user"] == "Hunter Name@Gilgamesh"
    assert payload["sightings"] == [{"zone_id": 8, "instance_number": 1, "mob_id": 41, "x": 3.0, "y": 3.0}]


def test_update_payload_is_none_without_supported_mobs(turtle_data) -> None:
    train = [UNSUPPORTED, UNSUPPORTED, UNSUPPORTED]

    assert build_update_payload(train, turtle_data.mobs, turtle_data.territories, "pw") is None


def test_update_payload_drops_mobs_in_unknown_territories(turtle_data) -> None:
    lost = TrainMob(mob_id=1001, territory_id=1, instance=None, position=(0.0, 0.0))

    assert build_update_payload([lost], turtle_data.mobs, turtle_data.territories, "pw") is None


def test_generation_payload_uses_nearest_spawn_points(turtle_data) -> None:
    body, highest_patch = build_generation_payload(
        [SUGRIVA, YILAN, UNSUPPORTED], turtle_data.mobs, turtle_data.territories
    )

    assert body == {
        "spawn_occurrences": [
            {"map_id": 5, "instance_number": 1, "point_id": 2, "mob_id": 31},
            {"map_id": 5, "instance_number": 2, "point_id": 1, "mob_id": 32},
        ]
    }
    assert highest_patch == Patch.EW


def test_generation_payload_reports_highest_patch(turtle_data) -> None:
    body, highest_patch = build_generation_payload([SUGRIVA, KIRLIRGER], turtle_data.mobs, turtle_data.territories)

    assert [occurrence["mob_id"] for occurrence in body["spawn_occurrences"]] == [31, 41]
    assert highest_patch == Patch.DT


def test_generation_payload_drops_mobs_without_spawn_points(turtle_data) -> None:
    # Labyrinthos (956) is known to Turtle but has no spawn points.
    no_points = TrainMob(mob_id=1002, territory_id=956, instance=None, position=(1.0, 1.0))
    unknown_map = TrainMob(mob_id=1001, territory_id=1, instance=None, position=(1.0, 1.0))

    body, highest_patch = build_generation_payload(
        [no_points, unknown_map, KIRLIRGER], turtle_data.mobs, turtle_data.territories
    )

    assert body == {"spawn_occurrences": [{"map_id": 8, "instance_number": 1, "point_id": 7, "mob_id": 41}]}
    assert highest_patch == Patch.DT


def test_generation_without_supported_mobs_fails(turtle_data) -> None:
    with pytest.raises(NoSupportedMobsError) as excinfo:
        build_generation_payload([UNSUPPORTED], turtle_data.mobs, turtle_data.territories)

    assert str(excinfo.value) == NO_SUPPORTED_MOBS_MESSAGE


def test_generation_allow_empty_uses_default_patch(turtle_data) -> None:
    body, highest_patch = build_generation_payload(
        [UNSUPPORTED], turtle_data.mobs, turtle_data.territories, allow_empty=True, default_patch=Patch.EW
    )

    assert body == {"spawn_occurrences": []}
    assert highest_patch == Patch.EW


def test_train_mob_from_json() -> None:
    mob = TrainMob.from_json({"mob_id": 1001, "territory_id": 957, "instance": None, "x": 19, "y": "28.5"})

    assert mob == TrainMob(1001, 957, None, (19.0, 28.5))
