import math

import pytest

from courtfit.geometry import (
    area_quad,
    area_tri,
    compare_by_x,
    cross,
    distance,
    length,
    normalize,
    perpendicular,
    seg_x_seg,
    sgn,
    sort_lines_by_distance_to_point,
    sort_lines_by_line_intersections,
)
from courtfit.line import Line


@pytest.mark.parametrize("v", [(3.0, 4.0), (-2.5, 7.0), (0.0, -9.0), (1e-3, 1e-3)])
def test_length_matches_distance_from_origin(v):
    assert length(v) == pytest.approx(distance((0.0, 0.0), v))


def test_distance_is_symmetric():
    a, b = (1.0, 2.0), (-4.0, 6.5)
    assert distance(a, b) == pytest.approx(distance(b, a))
    assert distance(a, a) == 0.0


def test_cross_is_antisymmetric():
    a, b = (2.0, 3.0), (-1.0, 5.0)
    assert cross(a, b) == pytest.approx(-cross(b, a))
    assert cross(a, a) == 0.0


def test_area_tri_is_order_independent():
    a, b = (2.0, 3.0), (-1.0, 5.0)
    assert area_tri(a, b) == pytest.approx(area_tri(b, a))
    assert area_tri(a, b) >= 0


def test_area_quad_of_square():
    assert area_quad((0, 0), (2, 0), (2, 2), (0, 2)) == pytest.approx(4.0)


def test_area_quad_invariant_under_rotation_of_corners():
    corners = [(0, 0), (5, 1), (6, 4), (1, 3)]
    rotated = corners[1:] + corners[:1]
    assert area_quad(*corners) == pytest.approx(area_quad(*rotated))


def test_perpendicular_is_orthogonal_and_same_length():
    v = (3.0, -7.0)
    p = perpendicular(v)
    assert v[0] * p[0] + v[1] * p[1] == pytest.approx(0.0)
    assert length(p) == pytest.approx(length(v))


def test_normalize_gives_unit_vector_in_same_direction():
    v = (6.0, -2.0)
    n = normalize(v)
    assert length(n) == pytest.approx(1.0)
    assert cross(v, n) == pytest.approx(0.0)
    assert n[0] * v[0] + n[1] * v[1] > 0


def test_normalize_zero_vector_raises():
    with pytest.raises(ValueError):
        normalize((0.0, 0.0))


@pytest.mark.parametrize("x, expected", [(2.0, 1), (-3.0, -1), (1e-7, 0), (-1e-7, 0), (0.0, 0)])
def test_sgn(x, expected):
    assert sgn(x) == expected


def test_compare_by_x_orders_by_x_then_y():
    assert compare_by_x((0, 0), (1, 0))
    assert not compare_by_x((1, 0), (0, 0))
    assert compare_by_x((0, 0), (0, 1))
    assert not compare_by_x((0, 1), (0, 0))


def test_compare_by_x_equal_points():
    assert not compare_by_x((2, 2), (2, 2))
    assert not compare_by_x((2, 2), (2 + 1e-8, 2))


def test_seg_x_seg_crossing_diagonals():
    assert seg_x_seg((0, 0), (2, 2), (0, 2), (2, 0))
    assert seg_x_seg((0, 2), (2, 0), (0, 0), (2, 2))


def test_seg_x_seg_shared_endpoint_is_not_a_crossing():
    assert not seg_x_seg((0, 0), (1, 0), (1, 0), (1, 1))


def test_seg_x_seg_disjoint_segments():
    assert not seg_x_seg((0, 0), (1, 0), (0, 1), (1, 1))
    assert not seg_x_seg((0, 0), (1, 1), (3, 0), (2, 1))


def test_seg_x_seg_collinear_overlap_and_touch():
    assert seg_x_seg((0, 0), (2, 0), (1, 0), (3, 0))
    assert not seg_x_seg((0, 0), (1, 0), (1, 0), (2, 0))
    assert not seg_x_seg((0, 0), (1, 0), (2, 0), (3, 0))


def test_seg_x_seg_degenerate_segment():
    assert not seg_x_seg((1, 1), (1, 1), (0, 0), (2, 2))


def test_sort_lines_by_distance_to_point():
    lines = [Line((0, y), (1, 0)) for y in (1.0, 5.0, 3.0)]
    ordered = sort_lines_by_distance_to_point(lines, (0, 0))
    assert [line.point[1] for line in ordered] == [1.0, 3.0, 5.0]
    assert len(lines) == 3


def test_sort_lines_by_line_intersections():
    reference = Line((0, 0), (0, 1))
    lines = [Line((0, y), (1, 0)) for y in (4.0, 2.0, 8.0)]
    ordered = sort_lines_by_line_intersections(lines, reference)
    assert [line.point[1] for line in ordered] == [2.0, 4.0, 8.0]


def test_sort_lines_by_line_intersections_handles_parallel_lines():
    reference = Line((0, 0), (1, 0))
    parallel_far = Line((0, 9), (1, 0))
    crossing_near = Line((1, 0), (0, 1))
    ordered = sort_lines_by_line_intersections([parallel_far, crossing_near], reference)
    assert ordered == [crossing_near, parallel_far]
    assert math.isclose(ordered[0].point[0], 1.0)