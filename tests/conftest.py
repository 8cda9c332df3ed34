# tests/conftest.py

import copy

import pytest

from axonplan.core.config import TopologySettings
from axonplan.core.models import CenterlineWall, Point2D


SCENARIO_A = {
    "walls": [
        {"id": "w1", "start": [0, 0], "end": [10, 0], "thickness": 0.25, "type": "exterior"},
    ],
    "rooms": [
        {"id": "r1", "polygon": [[0, 0], [10, 0], [10, 8], [0, 8], [0, 0]], "area_m2": 80},
    ],
    "openings": [],
    "meta": {"scale": 0.01, "bounds": {"minX": 0, "maxX": 10, "minY": 0, "maxY": 8}},
}


MALFORMED_RECORDS = [
    {
        "walls": [
            42,
            {"id": "w1", "start": [0, 0], "end": [10, 0], "thickness": 0.25, "type": "exterior"},
            {"id": "w1", "start": [10, 0], "end": [10, 8], "thickness": -1, "type": "bearing"},
            {"id": "w3", "start": [0, 0]},
            {"id": "w4", "start": [True, 0], "end": [5, 5]},
            {"id": "w5", "start": [0, 0], "end": [0.01, 0]},
        ],
        "rooms": [
            {"id": "r1", "polygon": [[0, 0], [10, 0], [10, 0], [10, 8], [0, 8]], "area_m2": 1},
            {"id": "r2", "polygon": "square"},
            {"polygon": [[0, 0], ["x", 1], [4, 0], [4, 4], None]},
            {"id": "r4", "polygon": [[0, 0], [5, 0], [10, 0]]},
        ],
        "openings": [
            {"id": "o1", "wallId": "w1", "type": "door", "position": 1.7},
            {"id": "o2", "wallId": "missing", "type": "window"},
            {"wallId": "w1", "type": "hatch"},
            "door",
        ],
        "meta": {"scale": "big", "source": "scan-7"},
    },
    {},
    {"walls": "x", "rooms": None, "openings": 5, "meta": None},
    {
        "rooms": [
            {"id": "r1", "polygon": [[0, 0], [0.001, 0], [5, 0], [5, 5], [0, 5], [0.002, 0.001]]},
        ],
        "meta": {"scale": 0.02},
    },
    {
        "walls": [
            {"id": ["a"], "start": [0, 0], "end": [3, 0], "type": ["x"]},
            {"id": "w2", "start": [3, 0], "end": [3, 4], "thickness": 0.1, "height": 3.0},
        ],
        "openings": [{"id": {"o": 1}, "wallId": "w2", "position": "mid"}],
    },
]


@pytest.fixture
def scenario_a_record():
    """A small well-formed record: one wall, one room."""
    return copy.deepcopy(SCENARIO_A)


@pytest.fixture(params=range(len(MALFORMED_RECORDS)), ids=lambda i: f"malformed{i}")
def malformed_record(request):
    return copy.deepcopy(MALFORMED_RECORDS[request.param])


@pytest.fixture
def settings():
    return TopologySettings()


@pytest.fixture
def straight_wall():
    """10 m wall along +x, 200 mm thick, 2700 mm high."""
    return CenterlineWall(
        centerline=[Point2D(x=0, y=0), Point2D(x=10000, y=0)],
        thickness=200,
        height=2700,
        source_id="straight",
    )
