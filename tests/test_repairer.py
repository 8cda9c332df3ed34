import copy

import pytest

from axonplan.core.config import TopologySettings
from axonplan.core.models import FloorPlan
from axonplan.core.vectors import shoelace_area
from axonplan.topology.repairer import (
    close_polygon,
    remove_duplicate_points,
    repair_floor_plan,
    repair_floor_plan_with_report,
)
from axonplan.topology.validator import validate_floor_plan


def _room_record(polygon):
    return {"walls": [], "rooms": [{"id": "r1", "polygon": polygon, "area_m2": 1}],
            "openings": [], "meta": {"scale": 0.01}}


def test_scenario_b_duplicate_point_is_removed_and_area_recomputed():
    repaired = repair_floor_plan(_room_record([[0, 0], [10, 0], [10, 0], [0, 8], [0, 0]]))

    polygon = repaired["rooms"][0]["polygon"]
    assert polygon == [[0, 0], [10, 0], [0, 8], [0, 0]]
    assert all(polygon[i] != polygon[i + 1] for i in range(len(polygon) - 1))
    assert repaired["rooms"][0]["area_m2"] == pytest.approx(40.0)


def test_scenario_e_short_wall_is_dropped_and_long_wall_kept():
    record = {
        "walls": [
            {"id": "short", "start": [0, 0], "end": [0.01, 0], "thickness": 0.2, "type": "interior"},
            {"id": "long", "start": [0, 0], "end": [10, 0], "thickness": 0.2, "type": "interior"},
        ],
        "meta": {"scale": 0.01},
    }

    repaired, report = repair_floor_plan_with_report(record)

    assert [w["id"] for w in repaired["walls"]] == ["long"]
    assert [a.path for a in report.dropped] == ["walls[0]"]


@pytest.mark.parametrize("record", [None, "plan", 3, [1, 2]])
def test_non_object_is_returned_unchanged(record):
    assert repair_floor_plan(record) is record


def test_repair_is_idempotent(malformed_record):
    once = repair_floor_plan(malformed_record)
    twice, report = repair_floor_plan_with_report(copy.deepcopy(once))

    assert twice == once
    assert report.is_clean()


def test_repaired_rooms_are_closed_with_positive_shoelace_area(malformed_record):
    repaired = repair_floor_plan(malformed_record)

    for room in repaired["rooms"]:
        polygon = room["polygon"]
        assert len(polygon) >= 4
        assert polygon[0] == polygon[-1]
        assert room["area_m2"] > 0
        assert room["area_m2"] == pytest.approx(shoelace_area(polygon))


def test_repaired_openings_reference_kept_walls(malformed_record):
    repaired = repair_floor_plan(malformed_record)

    wall_ids = {w["id"] for w in repaired["walls"]}
    assert all(o["wallId"] in wall_ids for o in repaired["openings"])
    assert all(0.0 <= o["position"] <= 1.0 for o in repaired["openings"])


def test_repaired_record_validates_and_parses(malformed_record):
    repaired = repair_floor_plan(malformed_record)

    assert validate_floor_plan(repaired).valid
    plan = FloorPlan.from_record(repaired)
    assert len(plan.walls) == len(repaired["walls"])


def test_repair_does_not_mutate_input(malformed_record):
    before = copy.deepcopy(malformed_record)

    repair_floor_plan(malformed_record)

    assert malformed_record == before


def test_wall_defaults_and_duplicate_ids():
    record = {
        "walls": [
            {"id": "w1", "start": [0, 0], "end": [4, 0]},
            {"id": "w1", "start": [4, 0], "end": [4, 3], "thickness": 0.1, "type": "partition"},
            {"start": [4, 3], "end": [0, 3], "thickness": True, "type": ["bad"]},
        ],
        "meta": {"scale": 0.01},
    }

    repaired, report = repair_floor_plan_with_report(record)
    walls = repaired["walls"]

    assert [w["id"] for w in walls] == ["w1", "wall-2", "wall-3"]
    assert walls[0]["thickness"] == 0.25
    assert walls[0]["type"] == "interior"
    assert walls[1]["type"] == "partition"
    assert walls[2]["thickness"] == 0.25
    defaulted = {a.path for a in report.defaulted}
    assert {"walls[0].thickness", "walls[0].type", "walls[1].id", "walls[2].id"} <= defaulted


def test_generated_wall_id_does_not_take_a_later_input_id():
    record = {
        "walls": [
            {"start": [0, 0], "end": [4, 0], "thickness": 0.2, "type": "interior"},
            {"id": "wall-1", "start": [0, 3], "end": [4, 3], "thickness": 0.2, "type": "interior"},
        ],
        "openings": [{"id": "d1", "wallId": "wall-1", "type": "door", "position": 0.5}],
        "meta": {"scale": 0.01},
    }

    repaired, report = repair_floor_plan_with_report(record)
    walls = {w["id"]: w for w in repaired["walls"]}

    assert list(walls) == ["wall-2", "wall-1"]
    door = repaired["openings"][0]
    assert walls[door["wallId"]]["start"] == [0.0, 3.0]
    assert {a.path for a in report.defaulted} == {"walls[0].id"}
    assert repair_floor_plan(repaired) == repaired


def test_generated_room_and_opening_ids_skip_later_input_ids():
    square = [[0, 0], [4, 0], [4, 3], [0, 3], [0, 0]]
    record = {
        "walls": [{"id": "w1", "start": [0, 0], "end": [4, 0], "thickness": 0.2, "type": "interior"}],
        "rooms": [{"polygon": square}, {"id": "room-1", "polygon": square}],
        "openings": [{"wallId": "w1"}, {"id": "opening-1", "wallId": "w1"}],
        "meta": {"scale": 0.01},
    }

    repaired = repair_floor_plan(record)

    assert [r["id"] for r in repaired["rooms"]] == ["room-2", "room-1"]
    assert [o["id"] for o in repaired["openings"]] == ["opening-2", "opening-1"]


def test_wall_height_is_kept_only_when_positive():
    record = {
        "walls": [
            {"id": "a", "start": [0, 0], "end": [4, 0], "thickness": 0.2, "type": "interior", "height": 3},
            {"id": "b", "start": [4, 0], "end": [4, 3], "thickness": 0.2, "type": "interior", "height": -1},
        ],
        "meta": {"scale": 0.01},
    }

    walls = repair_floor_plan(record)["walls"]

    assert walls[0]["height"] == 3.0
    assert "height" not in walls[1]


def test_opening_defaults_and_clamping():
    record = {
        "walls": [{"id": "w1", "start": [0, 0], "end": [4, 0], "thickness": 0.2, "type": "interior"}],
        "openings": [
            {"id": "o1", "wallId": "w1", "type": "door", "position": 1.7},
            {"id": "o2", "wallId": "w1", "type": "skylight", "position": -3},
            {"wallId": "w1"},
            {"id": "o4", "wallId": "nope"},
        ],
        "meta": {"scale": 0.01},
    }

    openings = repair_floor_plan(record)["openings"]

    assert [o["id"] for o in openings] == ["o1", "o2", "opening-3"]
    assert [o["position"] for o in openings] == [1.0, 0.0, 0.5]
    assert [o["type"] for o in openings] == ["door", "opening", "opening"]


def test_meta_gets_default_scale_and_recomputed_bounds():
    record = {
        "walls": [{"id": "w1", "start": [1, 2], "end": [6, 2], "thickness": 0.2, "type": "interior"}],
        "meta": {"scale": -5, "bounds": {"minX": -100}, "source": "scan"},
    }

    meta = repair_floor_plan(record)["meta"]

    assert meta["scale"] == 0.01
    assert meta["source"] == "scan"
    assert meta["bounds"] == {"minX": 1.0, "maxX": 6.0, "minY": 2.0, "maxY": 2.0}


def test_noisy_closing_points_fold_into_exact_closure():
    repaired = repair_floor_plan(
        _room_record([[0, 0], [0.001, 0], [5, 0], [5, 5], [0, 5], [0.002, 0.001]])
    )

    room = repaired["rooms"][0]
    assert room["polygon"] == [[0, 0], [5, 0], [5, 5], [0, 5], [0, 0]]
    assert room["area_m2"] == pytest.approx(25.0)


def test_collinear_room_is_dropped_with_report():
    repaired, report = repair_floor_plan_with_report(_room_record([[0, 0], [5, 0], [10, 0]]))

    assert repaired["rooms"] == []
    assert [a.path for a in report.dropped] == ["rooms[0]"]


def test_custom_settings_change_minimum_wall_length():
    record = {
        "walls": [{"id": "w1", "start": [0, 0], "end": [0.3, 0], "thickness": 0.2, "type": "interior"}],
        "meta": {"scale": 0.01},
    }

    assert len(repair_floor_plan(record)["walls"]) == 1
    assert repair_floor_plan(record, TopologySettings(min_wall_length=0.5))["walls"] == []


def test_point_helpers():
    points = [(0, 0), (0.001, 0), (1, 0), (1, 1)]
    assert remove_duplicate_points(points, 0.01) == [(0, 0), (1, 0), (1, 1)]
    assert remove_duplicate_points([], 0.01) == []

    assert close_polygon([(0, 0), (1, 0), (1, 1)], 0.01) == [(0, 0), (1, 0), (1, 1), (0, 0)]
    assert close_polygon([(0, 0), (1, 0), (1, 1), (0.005, 0)], 0.01) == [(0, 0), (1, 0), (1, 1), (0, 0)]
    assert close_polygon([], 0.01) == []


def test_repaired_record_round_trips_through_floor_plan(malformed_record):
    repaired = repair_floor_plan(malformed_record)

    assert FloorPlan.from_record(repaired).to_record() == repaired
