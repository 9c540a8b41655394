"""
This module tests the polygon ring helpers.
"""

# third party imports
import pytest

# our imports
from shapedecode.geometric_calculations import (
    bbox_contains,
    is_cw,
    organize_polygon_rings,
    ring_bbox,
    ring_contains_point,
    ring_contains_ring,
    signed_area,
)

CCW_SQUARE = [(0, 0), (10, 0), (10, 10), (0, 10), (0, 0)]
CW_HOLE = [(2, 2), (2, 4), (4, 4), (4, 2), (2, 2)]
CCW_SMALL = [(20, 20), (22, 20), (22, 22), (20, 22), (20, 20)]
CCW_INNER = [(1, 1), (9, 1), (9, 9), (1, 9), (1, 1)]


def test_signed_area():
    assert signed_area(CCW_SQUARE) == 100.0
    assert signed_area(list(reversed(CCW_SQUARE))) == -100.0
    # open rings give the same area
    assert signed_area(CCW_SQUARE[:-1]) == 100.0
    assert signed_area(CCW_SQUARE, fast=True) == 200.0


def test_signed_area_degenerate():
    assert signed_area([(0, 0), (1, 1)]) == 0.0


def test_is_cw():
    assert not is_cw(CCW_SQUARE)
    assert is_cw(CW_HOLE)


def test_ring_bbox():
    assert ring_bbox(CW_HOLE) == (2, 2, 4, 4)


@pytest.mark.parametrize(
    "bbox2,expected",
    [
        ((2, 2, 4, 4), True),
        ((0, 0, 10, 10), True),  # edges included
        ((5, 5, 11, 6), False),
        ((20, 20, 22, 22), False),
    ],
)
def test_bbox_contains(bbox2, expected):
    assert bbox_contains((0, 0, 10, 10), bbox2) is expected


@pytest.mark.parametrize(
    "point,expected",
    [
        ((5, 5), True),
        ((0.5, 9.5), True),
        ((15, 5), False),
        ((-1, 5), False),
        ((5, 11), False),
    ],
)
def test_ring_contains_point(point, expected):
    assert ring_contains_point(CCW_SQUARE, point) is expected


def test_ring_contains_ring():
    assert ring_contains_ring(CCW_SQUARE, CW_HOLE)
    assert not ring_contains_ring(CW_HOLE, CCW_SQUARE)


def test_organize_single_exterior():
    errors = {}
    polys = organize_polygon_rings([CCW_SQUARE, CW_HOLE], errors)
    assert polys == [[CCW_SQUARE, CW_HOLE]]
    assert errors == {}


def test_organize_holes_to_smallest_exterior():
    """
    Assert that a hole inside two nested exteriors
    is given to the smaller one.
    """
    polys = organize_polygon_rings([CCW_SQUARE, CCW_INNER, CW_HOLE, CCW_SMALL])
    assert polys == [[CCW_SQUARE], [CCW_INNER, CW_HOLE], [CCW_SMALL]]


def test_organize_only_holes():
    errors = {}
    hole2 = [(20, 20), (20, 22), (22, 22), (22, 20), (20, 20)]
    polys = organize_polygon_rings([CW_HOLE, hole2], errors)
    assert polys == [[CW_HOLE], [hole2]]
    assert errors == {"polygon_only_holes": 2}


def test_organize_orphaned_hole():
    errors = {}
    outside = [(50, 50), (50, 60), (60, 60), (60, 50), (50, 50)]
    polys = organize_polygon_rings([CCW_SQUARE, CCW_SMALL, outside], errors)
    assert polys == [[CCW_SQUARE], [CCW_SMALL], [outside]]
    assert errors == {"polygon_orphaned_holes": 1}
