"""Plane geometry helpers for points given as ``(x, y)`` pairs."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from courtfit.line import Line

Point = tuple[float, float]

EPS = 1e-6


def _sub(a: Sequence[float], b: Sequence[float]) -> Point:
    return (float(a[0]) - float(b[0]), float(a[1]) - float(b[1]))


def length(v: Sequence[float]) -> float:
    """Euclidean length of a vector."""
    return math.hypot(float(v[0]), float(v[1]))


def cross(p1: Sequence[float], p2: Sequence[float]) -> float:
    """Z component of the cross product of two plane vectors."""
    return float(p1[0]) * float(p2[1]) - float(p1[1]) * float(p2[0])


def distance(p1: Sequence[float], p2: Sequence[float]) -> float:
    """Euclidean distance between two points."""
    return length(_sub(p1, p2))


def area_tri(p1: Sequence[float], p2: Sequence[float]) -> float:
    """Area of the triangle spanned by two side vectors."""
    return abs(cross(p1, p2)) / 2.0


def area_quad(
    v0: Sequence[float], v1: Sequence[float], v2: Sequence[float], v3: Sequence[float]
) -> float:
    """Area of a convex quadrilateral given by its corners in order."""
    return area_tri(_sub(v1, v0), _sub(v3, v0)) + area_tri(_sub(v1, v2), _sub(v3, v2))


def perpendicular(v: Sequence[float]) -> Point:
    """The vector rotated by a quarter turn."""
    return (-float(v[1]), float(v[0]))


def normalize(v: Sequence[float]) -> Point:
    """Unit vector in the direction of ``v``."""
    norm = length(v)
    if norm == 0:
        raise ValueError("cannot normalize a zero-length vector")
    return (float(v[0]) / norm, float(v[1]) / norm)


def sgn(x: float) -> int:
    """Sign of ``x``, treating values within EPS of zero as zero."""
    if abs(x) < EPS:
        return 0
    return -1 if x < 0 else 1


def compare_by_x(a: Sequence[float], b: Sequence[float]) -> bool:
    """True when ``a`` orders before ``b`` by x, then by y, within EPS."""
    ax, ay = float(a[0]), float(a[1])
    bx, by = float(b[0]), float(b[1])
    return ax < bx - EPS or (ax <= bx + EPS and ay < by - EPS)


def seg_x_seg(
    a: Sequence[float], b: Sequence[float], c: Sequence[float], d: Sequence[float]
) -> bool:
    """True when segments ``ab`` and ``cd`` cross, not counting shared endpoints."""
    if distance(a, b) < EPS or distance(c, d) < EPS:
        return False
    sa = length(_sub(b, a))
    sc = length(_sub(d, c))
    sa = 1.0 / sa if sa > EPS else 0.0
    sc = 1.0 / sc if sc > EPS else 0.0
    r1 = sgn(cross(_sub(b, a), _sub(c, a)) * sa)
    r2 = sgn(cross(_sub(b, a), _sub(d, a)) * sa)
    r3 = sgn(cross(_sub(d, c), _sub(a, c)) * sc)
    r4 = sgn(cross(_sub(d, c), _sub(b, c)) * sc)
    if not r1 and not r2 and not r3:
        if compare_by_x(b, a):
            a, b = b, a
        if compare_by_x(d, c):
            c, d = d, c
        return compare_by_x(a, d) and compare_by_x(c, b)
    return r1 * r2 < 0 and r3 * r4 < 0


def sort_lines_by_distance_to_point(lines: Iterable[Line], point: Sequence[float]) -> list[Line]:
    """Lines ordered by their distance to ``point``, nearest first."""
    return sorted(lines, key=lambda candidate: candidate.distance(point))


def sort_lines_by_line_intersections(lines: Iterable[Line], line: Line) -> list[Line]:
    """Lines ordered by how far along ``line`` they meet it from its anchor point."""
    anchor = line.point

    def key(candidate: Line) -> float:
        hit = None
        if line.angle_to(candidate) > line.EPS:
            hit = line.intersection(candidate)
        if hit is None:
            hit = candidate.closest_point(anchor)
        return distance(hit, anchor)

    return sorted(lines, key=key)