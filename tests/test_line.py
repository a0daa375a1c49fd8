import math

import pytest

from courtfit.geometry import length
from courtfit.line import Line


def test_constructor_normalizes_vector():
    line = Line((1, 2), (3, 4))
    assert length(line.vector) == pytest.approx(1.0)
    assert line.point == (1.0, 2.0)


def test_default_line_keeps_zero_vector():
    line = Line()
    assert line.vector == (0.0, 0.0)
    assert line.point == (0.0, 0.0)


def test_unnormalized_construction_keeps_vector():
    line = Line((0, 0), (2.0, 0.5), normalized=False)
    assert line.vector == (2.0, 0.5)


def test_from_two_points_points_towards_positive_x():
    line = Line.from_two_points((5, 5), (1, 2))
    assert line.vector[0] >= 0
    assert length(line.vector) == pytest.approx(1.0)
    assert line.point == (5.0, 5.0)
    assert line.distance((1, 2)) == pytest.approx(0.0, abs=1e-9)


def test_from_two_points_order_gives_same_direction():
    a = Line.from_two_points((0, 0), (4, 3))
    b = Line.from_two_points((4, 3), (0, 0))
    assert a.vector == pytest.approx(b.vector)
    assert a.is_duplicate(b)


def test_from_rho_theta_vertical_line():
    line = Line.from_rho_theta(5.0, 0.0)
    assert line.distance((5.0, 100.0)) == pytest.approx(0.0, abs=1e-6)
    assert line.distance((0.0, 0.0)) == pytest.approx(5.0)


def test_intersection_of_axis_aligned_lines():
    horizontal = Line((0, 2), (1, 0))
    vertical = Line((3, 0), (0, 1))
    assert horizontal.intersection(vertical) == pytest.approx((3.0, 2.0))
    assert vertical.intersection(horizontal) == pytest.approx((3.0, 2.0))


def test_intersection_lies_on_both_lines():
    a = Line.from_two_points((0, 0), (10, 3))
    b = Line.from_two_points((0, 8), (7, -1))
    hit = a.intersection(b)
    assert a.distance(hit) == pytest.approx(0.0, abs=1e-9)
    assert b.distance(hit) == pytest.approx(0.0, abs=1e-9)


def test_parallel_lines_have_no_intersection():
    a = Line((0, 0), (1, 1))
    b = Line((0, 5), (1, 1))
    assert a.intersection(b) is None


def test_distance_to_horizontal_line():
    line = Line((0, 0), (1, 0))
    assert line.distance((4, 7)) == pytest.approx(7.0)
    assert line.distance((4, -7)) == pytest.approx(7.0)


def test_perpendicular_distance_is_signed():
    line = Line.from_two_points((0, 0), (10, 4))
    above = line.perpendicular_distance((2, 9))
    below = line.perpendicular_distance((2, -9))
    assert above * below < 0
    assert abs(above) == pytest.approx(line.distance((2, 9)))


def test_closest_point_is_on_line_and_orthogonal():
    line = Line.from_two_points((1, 1), (6, 3))
    point = (2.0, 8.0)
    foot = line.closest_point(point)
    assert line.distance(foot) == pytest.approx(0.0, abs=1e-9)
    offset = (point[0] - foot[0], point[1] - foot[1])
    dot = offset[0] * line.vector[0] + offset[1] * line.vector[1]
    assert dot == pytest.approx(0.0, abs=1e-9)


def test_evaluate_by_x():
    horizontal = Line((0, 2), (1, 0))
    assert horizontal.evaluate_by_x(50.0) == pytest.approx(2.0)
    vertical = Line((3, 0), (0, 1))
    assert vertical.evaluate_by_x(3.0) == math.inf


def test_evaluate_by_x_lies_on_line():
    line = Line.from_two_points((0, 1), (4, 9))
    y = line.evaluate_by_x(2.5)
    assert line.distance((2.5, y)) == pytest.approx(0.0, abs=1e-9)


def test_is_duplicate():
    base = Line((0, 100), (1, 0))
    assert base.is_duplicate(Line((0, 105), (1, 0)))
    assert not base.is_duplicate(Line((0, 120), (1, 0)))
    assert not base.is_duplicate(Line((0, 100), (1, 1)))


def test_is_parallel_with_tolerance():
    base = Line((0, 0), (1, 0))
    slight = Line((0, 50), (1, 0.05))
    assert base.is_parallel(Line((0, 50), (1, 0)))
    assert not base.is_parallel(slight)
    assert base.is_parallel(slight, 0.2)


def test_to_implicit_holds_for_points_on_line():
    line = Line.from_two_points((1, 2), (7, -3))
    n, c = line.to_implicit()
    for t in (-5.0, 0.0, 3.0):
        p = (line.point[0] + t * line.vector[0], line.point[1] + t * line.vector[1])
        assert n[0] * p[0] + n[1] * p[1] == pytest.approx(c)


def test_angle_to():
    horizontal = Line((0, 0), (1, 0))
    vertical = Line((0, 0), (0, 1))
    assert horizontal.angle_to(vertical) == pytest.approx(math.pi / 2)
    assert horizontal.angle_to(horizontal) == pytest.approx(0.0)


def test_angle_to_is_symmetric():
    a = Line.from_two_points((0, 0), (5, 2))
    b = Line.from_two_points((0, 0), (1, 7))
    assert a.angle_to(b) == pytest.approx(b.angle_to(a))
    assert 0 <= a.angle_to(b) <= math.pi / 2