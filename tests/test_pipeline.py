import pytest

from axonplan.core.models import CenterlineWall, FaceStyle, Point2D, TopologyWall, WallType
from axonplan.geometry.extrusion import DegenerateFootprintError
from axonplan.pipeline import (
    WallPipeline,
    join_centerlines,
    process_wall,
    process_walls,
    render_floor_plan,
    topology_wall_to_centerline,
    topology_walls_to_centerlines,
)


def _wall(x1, y1, x2, y2, wall_id, thickness=200, height=2700):
    return CenterlineWall(
        centerline=[Point2D(x=x1, y=y1), Point2D(x=x2, y=y2)],
        thickness=thickness,
        height=height,
        source_id=wall_id,
    )


def _square_walls(size=4000):
    return [
        _wall(0, 0, size, 0, "a"),
        _wall(size, 0, size, size, "b"),
        _wall(size, size, 0, size, "c"),
        _wall(0, size, 0, 0, "d"),
    ]


def test_record_dict_with_list_points_converts():
    wall = topology_wall_to_centerline({"id": "w1", "start": [0, 0], "end": [5, 0], "thickness": 150})

    assert [(p.x, p.y) for p in wall.centerline] == [(0, 0), (5, 0)]
    assert wall.thickness == 150
    assert wall.height == 2700
    assert wall.source_id == "w1"


def test_record_dict_with_xy_points_and_missing_thickness_uses_defaults():
    wall = topology_wall_to_centerline(
        {"start": {"x": 1, "y": 2}, "end": {"x": 3, "y": 4}, "thickness": 0},
        default_height=3000,
        default_thickness=120,
    )

    assert [(p.x, p.y) for p in wall.centerline] == [(1, 2), (3, 4)]
    assert wall.thickness == 120
    assert wall.height == 3000
    assert wall.source_id is None


def test_topology_wall_is_scaled_to_pipeline_units():
    topo = TopologyWall(id="w1", start=(0, 0), end=(10, 0), thickness=0.25,
                        type=WallType.EXTERIOR, height=3.0)

    wall = topology_wall_to_centerline(topo, unit_scale=1000)

    assert [(p.x, p.y) for p in wall.centerline] == [(0, 0), (10000, 0)]
    assert wall.thickness == pytest.approx(250)
    assert wall.height == pytest.approx(3000)


def test_centerline_wall_passes_through_unchanged():
    wall = _wall(0, 0, 1, 0, "x")
    assert topology_wall_to_centerline(wall, unit_scale=1000) is wall


def test_walls_stay_separate_without_joining():
    assert len(topology_walls_to_centerlines(_square_walls())) == 4


def test_square_of_walls_joins_into_closed_loop():
    joined = topology_walls_to_centerlines(_square_walls(), join_connected=True)

    assert len(joined) == 1
    loop = joined[0]
    assert len(loop.centerline) == 5
    assert loop.is_closed()
    assert loop.source_id == "a,b,c,d"


def test_reversed_neighbour_is_joined_end_to_end():
    walls = [_wall(0, 0, 5, 0, "a"), _wall(5, 5, 5, 0, "b")]

    joined = join_centerlines(walls)

    assert len(joined) == 1
    assert [(p.x, p.y) for p in joined[0].centerline] == [(0, 0), (5, 0), (5, 5)]


def test_walls_with_different_sections_are_not_joined():
    walls = [_wall(0, 0, 5, 0, "a"), _wall(5, 0, 5, 5, "b", thickness=100)]

    assert len(join_centerlines(walls)) == 2


def test_there_and_back_walls_are_not_joined_into_a_loop():
    walls = [_wall(0, 0, 5, 0, "a"), _wall(5, 0, 0, 0, "b")]

    assert len(join_centerlines(walls)) == 2


def test_straight_wall_shows_right_and_front_faces(straight_wall):
    faces = process_wall(straight_wall)

    assert [f.style for f in faces] == [FaceStyle.RIGHT, FaceStyle.FRONT]
    assert all(f.source_id == "straight" for f in faces)
    assert all(f.depth == pytest.approx(1350) for f in faces)


def test_closed_loop_wall_renders():
    loop = join_centerlines(_square_walls())[0]

    faces = process_wall(loop)

    assert faces
    assert all(f.source_id == "a,b,c,d" for f in faces)


def test_zero_length_wall_raises():
    with pytest.raises(DegenerateFootprintError):
        process_wall(_wall(0, 0, 0, 0, "zero"))


def test_process_walls_depth_sorts_merged_faces():
    walls = [_wall(0, 0, 5000, 0, "low", height=1000), _wall(0, 3000, 5000, 3000, "high", height=3000)]

    faces = process_walls(walls)

    depths = [f.depth for f in faces]
    assert depths == sorted(depths, reverse=True)
    assert faces[0].source_id == "high"


def test_parallel_and_sequential_results_match():
    walls = _square_walls() + [_wall(0, 6000, 9000, 6000, "e", height=3200)]

    sequential = process_walls(walls)
    parallel = process_walls(walls, max_workers=4)

    assert parallel == sequential


def test_degenerate_wall_is_skipped_and_reported(straight_wall):
    walls = [_wall(0, 0, 0, 0, "zero"), straight_wall]

    result = WallPipeline().run(walls)

    assert result.skipped == ["zero"]
    assert {f.source_id for f in result.faces} == {"straight"}
    assert process_walls(walls) == result.faces


def test_render_scenario_a_record(scenario_a_record):
    render = render_floor_plan(scenario_a_record)

    assert render.validation.valid
    assert render.report.is_clean()
    assert render.skipped == []
    assert len(render.plan.walls) == 1
    assert [f.style for f in render.faces] == [FaceStyle.RIGHT, FaceStyle.FRONT]
    assert all(f.source_id == "w1" for f in render.faces)

    # 10 m wall is drawn in millimetres: its far end projects to x = (10000 + 125) * cos 30
    right = render.faces[0]
    assert max(v.x for v in right.vertices) == pytest.approx(10125 * 3 ** 0.5 / 2)


def test_render_uses_wall_height_from_record(scenario_a_record):
    scenario_a_record["walls"][0]["height"] = 3.0

    render = render_floor_plan(scenario_a_record)

    assert all(f.depth == pytest.approx(1500) for f in render.faces)


def test_render_repairs_malformed_record(malformed_record):
    render = render_floor_plan(malformed_record)

    assert not render.validation.valid
    assert render.skipped == []
    assert len({f.source_id for f in render.faces}) == len(render.plan.walls)


def test_render_can_join_connected_walls():
    record = {
        "walls": [
            {"id": "a", "start": [0, 0], "end": [4, 0], "thickness": 0.2, "type": "exterior"},
            {"id": "b", "start": [4, 0], "end": [4, 3], "thickness": 0.2, "type": "exterior"},
        ],
        "meta": {"scale": 0.01},
    }

    render = render_floor_plan(record, join_connected=True)

    assert {f.source_id for f in render.faces} == {"a,b"}


@pytest.mark.parametrize("record", [None, [], "plan", 42])
def test_render_rejects_records_that_are_not_objects(record):
    with pytest.raises(ValueError, match="Record must be an object"):
        render_floor_plan(record)
