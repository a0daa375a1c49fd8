"""Infinite lines in the image plane and the detector's shared constants."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import ClassVar

from courtfit.geometry import Point, distance, length, perpendicular

FG_VALUE = 255
BG_VALUE = 0
INITIAL_FIT_SCORE = -1e9
DEGREE_SEP_THRESH = 20.0


def _as_point(p: Sequence[float]) -> Point:
    return (float(p[0]), float(p[1]))


class Line:
    """A line through ``point`` along ``vector``.

    The direction is scaled to unit length unless ``normalized`` is false
    or the vector has zero length.
    """

    EPS: ClassVar[float] = 1e-5
    BIG_EPS: ClassVar[float] = 1e-2
    PIXEL_EPS: ClassVar[float] = 10.0

    __slots__ = ("point", "vector")

    def __init__(
        self,
        point: Sequence[float] = (0.0, 0.0),
        vector: Sequence[float] = (0.0, 0.0),
        *,
        normalized: bool = True,
    ) -> None:
        self.point = _as_point(point)
        vx, vy = _as_point(vector)
        norm = length((vx, vy))
        if normalized and norm > 0:
            vx, vy = vx / norm, vy / norm
        self.vector = (vx, vy)

    def __repr__(self) -> str:
        return f"Line(point={self.point!r}, vector={self.vector!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Line):
            return NotImplemented
        return self.point == other.point and self.vector == other.vector

    def __hash__(self) -> int:
        return hash((self.point, self.vector))

    @classmethod
    def from_rho_theta(cls, rho: float, theta: float) -> Line:
        """Line in Hough normal form ``x cos(theta) + y sin(theta) = rho``."""
        a, b = math.cos(theta), math.sin(theta)
        x0, y0 = a * rho, b * rho
        p1 = (x0 + 2000 * (-b), y0 + 2000 * a)
        p2 = (x0 - 2000 * (-b), y0 - 2000 * a)
        return cls.from_two_points(p1, p2)

    @classmethod
    def from_two_points(cls, p1: Sequence[float], p2: Sequence[float]) -> Line:
        """Line through two points, with its direction pointing towards positive x."""
        start = _as_point(p1)
        end = _as_point(p2)
        vx, vy = end[0] - start[0], end[1] - start[1]
        if vx < 0:
            vx, vy = -vx, -vy
        return cls(start, (vx, vy))

    def intersection(self, other: Line) -> Point | None:
        """Point where the two lines meet, or None when they are parallel."""
        ux, uy = self.point
        ox, oy = other.point[0] - ux, other.point[1] - uy
        d1x, d1y = self.vector
        d2x, d2y = other.vector
        det = d1x * d2y - d1y * d2x
        if abs(det) < self.EPS:
            return None
        t = (ox * d2y - oy * d2x) / det
        return (ux + d1x * t, uy + d1y * t)

    def closest_point(self, point: Sequence[float]) -> Point:
        """Orthogonal projection of ``point`` onto the line."""
        px, py = _as_point(point)
        ux, uy = self.point
        vx, vy = self.vector
        t = vx * (px - ux) + vy * (py - uy)
        return (ux + t * vx, uy + t * vy)

    def distance(self, point: Sequence[float]) -> float:
        """Unsigned distance from ``point`` to the line."""
        return distance(point, self.closest_point(point))

    def perpendicular_distance(self, point: Sequence[float]) -> float:
        """Signed distance from ``point`` to the line."""
        px, py = _as_point(point)
        cx, cy = self.closest_point(point)
        nx, ny = perpendicular(self.vector)
        return (px - cx) * nx + (py - cy) * ny

    def evaluate_by_x(self, x: float) -> float:
        """The y value of the line at ``x``; infinite for vertical lines."""
        vx, vy = self.vector
        if vx == 0:
            return math.inf
        return self.point[1] + (x - self.point[0]) * vy / vx

    def is_duplicate(self, other: Line) -> bool:
        """True when both lines have nearly the same offset and direction."""
        origin = (0.0, 0.0)
        offset_gap = abs(other.distance(origin) - self.distance(origin))
        return offset_gap < self.PIXEL_EPS and distance(other.vector, self.vector) < self.BIG_EPS

    def is_parallel(self, other: Line, tol: float = BIG_EPS) -> bool:
        """True when the direction vectors differ by less than ``tol``."""
        return distance(other.vector, self.vector) < tol

    def to_implicit(self) -> tuple[Point, float]:
        """Normal ``n`` and offset ``c`` such that ``n . p == c`` on the line."""
        n = perpendicular(self.vector)
        c = n[0] * self.point[0] + n[1] * self.point[1]
        return n, c

    def angle_to(self, other: Line) -> float:
        """Unsigned angle between the two lines, at most a quarter turn."""
        angle = abs(
            math.atan2(self.vector[1], self.vector[0])
            - math.atan2(other.vector[1], other.vector[0])
        )
        return min(angle, math.pi - angle)