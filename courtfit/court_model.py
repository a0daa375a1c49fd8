"""Geometric model of a badminton court and its fit to a binary line image."""

from __future__ import annotations

import itertools
import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from courtfit.drawing import draw_segment
from courtfit.geometry import Point, area_quad, distance, normalize, seg_x_seg
from courtfit.line import FG_VALUE, INITIAL_FIT_SCORE, Line

LinePair = tuple[Line, Line]

_H = (1.0, 0.0)
_V = (0.0, 1.0)

UPPER_BASE = Line((0.0, 0.0), _H)
UPPER_DOUBLES = Line((0.0, 0.76), _H)
UPPER_SERVICE = Line((0.0, 4.72), _H)
NET = Line((0.0, 6.705), _H)
LOWER_SERVICE = Line((0.0, 8.685), _H)
LOWER_DOUBLES = Line((0.0, 12.65), _H)
LOWER_BASE = Line((0.0, 13.41), _H)

LEFT_SIDE = Line((0.0, 0.0), _V)
LEFT_SINGLES = Line((0.46, 0.0), _V)
CENTRE_SERVICE = Line((3.05, 0.0), _V)
RIGHT_SINGLES = Line((5.64, 0.0), _V)
RIGHT_SIDE = Line((6.1, 0.0), _V)

H_LINES = (
    LOWER_BASE,
    LOWER_DOUBLES,
    LOWER_SERVICE,
    NET,
    UPPER_SERVICE,
    UPPER_DOUBLES,
    UPPER_BASE,
)
V_LINES = (LEFT_SIDE, LEFT_SINGLES, CENTRE_SERVICE, RIGHT_SINGLES, RIGHT_SIDE)

_CROSSINGS = (
    (UPPER_BASE, LEFT_SIDE),
    (LOWER_BASE, LEFT_SIDE),
    (LOWER_BASE, RIGHT_SIDE),
    (UPPER_BASE, RIGHT_SIDE),
    (UPPER_BASE, LEFT_SINGLES),
    (LOWER_BASE, LEFT_SINGLES),
    (LOWER_BASE, RIGHT_SINGLES),
    (UPPER_BASE, RIGHT_SINGLES),
    (LEFT_SIDE, UPPER_SERVICE),
    (RIGHT_SIDE, UPPER_SERVICE),
    (LEFT_SIDE, LOWER_SERVICE),
    (RIGHT_SIDE, LOWER_SERVICE),
    (UPPER_SERVICE, CENTRE_SERVICE),
    (LOWER_SERVICE, CENTRE_SERVICE),
    (LEFT_SIDE, NET),
    (RIGHT_SIDE, NET),
    (LEFT_SIDE, UPPER_DOUBLES),
    (RIGHT_SIDE, UPPER_DOUBLES),
    (LEFT_SIDE, LOWER_DOUBLES),
    (RIGHT_SIDE, LOWER_DOUBLES),
    (UPPER_BASE, CENTRE_SERVICE),
    (LOWER_BASE, CENTRE_SERVICE),
)


def _crossing(a: Line, b: Line) -> Point:
    point = a.intersection(b)
    if point is None:
        raise ValueError("court lines do not cross")
    return point


COURT_POINTS: tuple[Point, ...] = tuple(_crossing(a, b) for a, b in _CROSSINGS)

# Index pairs of court points joined by a painted court line.
COURT_SEGMENTS = (
    (0, 1), (1, 2), (2, 3), (3, 0),
    (4, 5), (6, 7), (8, 9), (10, 11),
    (12, 20), (13, 21), (16, 17), (18, 19),
)

_SEGMENT_WEIGHTS = (1.25, 1.25, 1.25, 1.25, 2, 2, 1, 1, 1, 1, 1, 1)

# Court lines that a net candidate must not coincide with.
_NET_EXCLUDED = ((8, 9), (10, 11), (16, 17), (18, 19), (14, 15))

_FLT_EPSILON = float(np.finfo(np.float32).eps)


def get_possible_line_pairs(lines: Sequence[Line]) -> list[LinePair]:
    """Every pair of distinct lines, keeping their order."""
    return list(itertools.combinations(lines, 2))


H_LINE_PAIRS = get_possible_line_pairs(H_LINES)
V_LINE_PAIRS = get_possible_line_pairs(V_LINES)


def perspective_matrix(src: Sequence[Sequence[float]], dst: Sequence[Sequence[float]]) -> np.ndarray:
    """The 3x3 homography taking the four ``src`` points onto the four ``dst`` points."""
    if len(src) != 4 or len(dst) != 4:
        raise ValueError("a perspective transform needs exactly four point pairs")
    a = np.zeros((8, 8))
    b = np.zeros(8)
    for i, ((x, y), (u, v)) in enumerate(zip(src, dst)):
        a[i] = (x, y, 1, 0, 0, 0, -x * u, -y * u)
        a[i + 4] = (0, 0, 0, x, y, 1, -x * v, -y * v)
        b[i] = u
        b[i + 4] = v
    try:
        solution = np.linalg.solve(a, b)
    except np.linalg.LinAlgError as exc:
        raise ValueError("points are degenerate") from exc
    return np.append(solution, 1.0).reshape(3, 3)


def apply_perspective(points: Sequence[Sequence[float]], matrix: np.ndarray) -> list[Point]:
    """Each point mapped through the homography ``matrix``."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    homogeneous = np.column_stack([pts, np.ones(len(pts))]) @ np.asarray(matrix).T
    w = homogeneous[:, 2]
    scale = np.zeros_like(w)
    usable = np.abs(w) > _FLT_EPSILON
    scale[usable] = 1.0 / w[usable]
    return [(float(x * s), float(y * s)) for (x, y), s in zip(homogeneous[:, :2], scale)]


def is_convex(points: Sequence[Sequence[float]]) -> bool:
    """True when the closed polygon turns strictly the same way at every corner."""
    pts = [(float(p[0]), float(p[1])) for p in points]
    n = len(pts)
    if n < 3:
        return False
    signs = set()
    for i in range(n):
        ax, ay = pts[i - 1]
        bx, by = pts[i]
        cx, cy = pts[(i + 1) % n]
        turn = (bx - ax) * (cy - by) - (by - ay) * (cx - bx)
        if turn == 0:
            return False
        signs.add(turn > 0)
    return len(signs) == 1


def point_polygon_distance(polygon: Sequence[Sequence[float]], point: Sequence[float]) -> float:
    """Signed distance to the polygon edge: positive inside, negative outside, zero on it."""
    px, py = float(point[0]), float(point[1])
    pts = [(float(p[0]), float(p[1])) for p in polygon]
    best = math.inf
    inside = False
    for (ax, ay), (bx, by) in zip(pts, pts[1:] + pts[:1]):
        dx, dy = bx - ax, by - ay
        len2 = dx * dx + dy * dy
        t = 0.0 if len2 == 0 else min(1.0, max(0.0, ((px - ax) * dx + (py - ay) * dy) / len2))
        best = min(best, math.hypot(px - ax - t * dx, py - ay - t * dy))
        if (ay > py) != (by > py):
            if px < ax + (py - ay) * dx / dy:
                inside = not inside
    if best == 0:
        return 0.0
    return best if inside else -best


def prune_segment(
    start: Sequence[float], end: Sequence[float], shape: Sequence[int]
) -> tuple[Point, Point] | None:
    """The segment ordered left to right and clipped to the image, or None if nothing is left."""
    rows, cols = int(shape[0]), int(shape[1])
    eps = Line.EPS
    sx, sy = float(start[0]), float(start[1])
    ex, ey = float(end[0]), float(end[1])
    if sx > ex:
        sx, sy, ex, ey = ex, ey, sx, sy
    if abs(sx - ex) < eps and sy > ey:
        sx, sy, ex, ey = ex, ey, sx, sy

    dx, dy = ex - sx, ey - sy
    if sx < 0 and abs(dx) > eps:
        t = -sx / dx
        sx, sy = sx + t * dx, sy + t * dy
    if sy < 0 and abs(dy) > eps:
        t = -sy / dy
        if t < 0:
            return None
        sx, sy = sx + t * dx, sy + t * dy
    if sy >= rows - 1 and abs(dy) > eps:
        t = (rows - 1 - sy) / dy
        if t < 0:
            return None
        sx, sy = sx + t * dx, sy + t * dy
    if ex >= cols - 1 and abs(dx) > eps:
        t = (cols - 1 - ex) / dx
        ex, ey = ex + t * dx, ey + t * dy
    if ey >= rows - 1 and abs(dy) > eps:
        t = (rows - 1 - ey) / dy
        if t > 0:
            return None
        ex, ey = ex + t * dx, ey + t * dy
    if ey < 0 and abs(dy) > eps:
        t = -ey / dy
        if t > 0:
            return None
        ex, ey = ex + t * dx, ey + t * dy

    if sx > ex:
        return None
    if int(distance((sx, sy), (ex, ey))) == 0:
        return None
    return (sx, sy), (ex, ey)


def _round(values: np.ndarray) -> np.ndarray:
    return np.where(values >= 0, np.floor(values + 0.5), np.ceil(values - 0.5)).astype(np.int64)


def _raster(
    start: Sequence[float], end: Sequence[float], shape: Sequence[int]
) -> tuple[np.ndarray, np.ndarray, int] | None:
    pruned = prune_segment(start, end, shape)
    if pruned is None:
        return None
    (sx, sy), (ex, ey) = pruned
    n = int(distance((sx, sy), (ex, ey)))
    vx, vy = normalize((ex - sx, ey - sy))
    steps = np.arange(n)
    return _round(sx + steps * vx), _round(sy + steps * vy), n


def _inside(xs: np.ndarray, ys: np.ndarray, shape: Sequence[int]) -> np.ndarray:
    return (xs >= 0) & (xs < shape[1]) & (ys >= 0) & (ys < shape[0])


def score_segment(
    start: Sequence[float], end: Sequence[float], binary_image: np.ndarray, weight: float = 1.0
) -> float:
    """Weighted count of line pixels along the segment, with a penalty for missing ones."""
    raster = _raster(start, end, binary_image.shape[:2])
    if raster is None:
        return 0.0
    xs, ys, n = raster
    inside = _inside(xs, ys, binary_image.shape[:2])
    hits = int(np.count_nonzero(binary_image[ys[inside], xs[inside]] == FG_VALUE))
    score = hits * 1.0 + (n - hits) * (-0.5 / weight)
    return weight * score


def remove_segment(start: Sequence[float], end: Sequence[float], binary_image: np.ndarray) -> None:
    """Clear the pixels along the segment in place."""
    raster = _raster(start, end, binary_image.shape[:2])
    if raster is None:
        return
    xs, ys, _ = raster
    inside = _inside(xs, ys, binary_image.shape[:2])
    binary_image[ys[inside], xs[inside]] = 0


def rasterized_segment_length(
    start: Sequence[float], end: Sequence[float], binary_image: np.ndarray
) -> float:
    """Length of the part of the segment that lies in the image."""
    pruned = prune_segment(start, end, binary_image.shape[:2])
    if pruned is None:
        return 0.0
    return distance(*pruned)


@dataclass
class BadmintonCourtModel:
    """A badminton court in metres and its perspective mapping onto an image."""

    transformation_matrix: np.ndarray | None = None
    net_points: list[Point] = field(default_factory=list)

    def intersection_points(self, h_pair: LinePair, v_pair: LinePair) -> list[Point]:
        """Corners of the box formed by two line pairs, in drawing order."""
        crossings = (
            h_pair[0].intersection(v_pair[0]),
            h_pair[0].intersection(v_pair[1]),
            h_pair[1].intersection(v_pair[1]),
            h_pair[1].intersection(v_pair[0]),
        )
        return [p for p in crossings if p is not None]

    def fit(self, h_pair: LinePair, v_pair: LinePair, binary_image: np.ndarray) -> float:
        """Best score of mapping any model box onto the image box; keeps the best mapping."""
        best = INITIAL_FIT_SCORE
        points = self.intersection_points(h_pair, v_pair)
        if len(points) < 4:
            return best
        if seg_x_seg(points[0], points[1], points[2], points[3]) or seg_x_seg(
            points[1], points[2], points[3], points[0]
        ):
            return best
        if not is_convex(points):
            return best

        for model_h in H_LINE_PAIRS:
            for model_v in V_LINE_PAIRS:
                model_points = self.intersection_points(model_h, model_v)
                matrix = perspective_matrix(model_points, points)
                transformed = apply_perspective(COURT_POINTS, matrix)
                score = self.evaluate(transformed, binary_image)
                if score > best:
                    best = score
                    self.transformation_matrix = matrix
        return best

    def fit_net(self, lines: Sequence[Line], binary_image: np.ndarray) -> float:
        """Score of the best net line among ``lines``; keeps its end points."""
        points = self.transformed_points()
        left_net, right_net = points[14], points[15]
        middle = Line.from_two_points(left_net, right_net)
        excluded = [Line.from_two_points(points[a], points[b]) for a, b in _NET_EXCLUDED]

        filtered_image = binary_image.copy()
        for a, b in COURT_SEGMENTS:
            remove_segment(points[a], points[b], filtered_image)

        rows = binary_image.shape[0]
        low, high = 0.05 * rows, 0.4 * rows
        xmid = (left_net[0] + right_net[0]) / 2.0
        middle_y = middle.evaluate_by_x(xmid)
        candidates = []
        for line in lines:
            if not middle.is_parallel(line, 0.2):
                continue
            if any(other.is_duplicate(line) for other in excluded):
                continue
            y = line.evaluate_by_x(xmid)
            if middle_y - high < y < middle_y - low:
                candidates.append(line)

        best = INITIAL_FIT_SCORE
        for line in candidates:
            left_post = line.closest_point(left_net)
            right_post = line.closest_point(right_net)
            seg_length = rasterized_segment_length(left_post, right_post, filtered_image)
            if seg_length < 0.5 * distance(left_post, right_post):
                continue
            left_gap = distance(left_post, left_net)
            right_gap = distance(right_post, right_net)
            if left_gap > seg_length * 0.33 or right_gap > seg_length * 0.33:
                continue
            if left_gap < seg_length * 0.1 or right_gap < seg_length * 0.1:
                continue
            score = score_segment(left_post, right_post, binary_image, 4)
            if score > best:
                best = score
                self.net_points = [left_post, right_post]
        return best

    def evaluate(self, court_points: Sequence[Point], binary_image: np.ndarray) -> float:
        """Score of the court drawn at ``court_points`` against the line pixels."""
        rows, cols = binary_image.shape[:2]
        p = court_points
        sides = (distance(p[0], p[1]), distance(p[1], p[2]), distance(p[2], p[3]), distance(p[3], p[0]))
        if min(sides) < 168:
            return INITIAL_FIT_SCORE
        if seg_x_seg(p[0], p[1], p[2], p[3]) or seg_x_seg(p[1], p[2], p[3], p[0]):
            return INITIAL_FIT_SCORE

        def on_screen(q: Point) -> bool:
            return 0 <= q[0] < cols and 0 <= q[1] < rows

        if sum(not on_screen(q) for q in p[:4]) >= 3:
            return INITIAL_FIT_SCORE

        out = 512
        if any(q[0] < -out or q[1] < -out or q[0] >= cols + out or q[1] >= rows + out for q in p):
            return INITIAL_FIT_SCORE

        screen = [
            q if on_screen(q) else (min(float(cols), max(0.0, q[0])), min(float(rows), max(0.0, q[1])))
            for q in p[:4]
        ]
        if area_quad(*screen) < 0.1 * rows * cols:
            return INITIAL_FIT_SCORE

        quad = list(p[:4])
        if any(point_polygon_distance(quad, q) < -Line.PIXEL_EPS for q in p[4:]):
            return INITIAL_FIT_SCORE

        return sum(
            score_segment(p[a], p[b], binary_image, w)
            for (a, b), w in zip(COURT_SEGMENTS, _SEGMENT_WEIGHTS)
        )

    def transformed_points(self) -> list[Point]:
        """The court points mapped into the image."""
        if self.transformation_matrix is None:
            raise ValueError("the model has not been fitted")
        return apply_perspective(COURT_POINTS, self.transformation_matrix)

    def draw(self, image: np.ndarray, color: Sequence[int] = (0, 255, 255)) -> None:
        """Draw the fitted court lines, and the net if found, onto ``image`` in place."""
        points = self.transformed_points()
        for a, b in COURT_SEGMENTS:
            draw_segment(points[a], points[b], image, color)
        if self.net_points:
            net_color = (0, 255, 0)
            draw_segment(self.net_points[0], self.net_points[1], image, net_color)
            draw_segment(points[14], self.net_points[0], image, net_color)
            draw_segment(points[15], self.net_points[1], image, net_color)

    def write_csv(self, path: str) -> None:
        """Write the image coordinates of the court points and net poles as CSV."""
        if len(self.net_points) < 2:
            raise ValueError("the net has not been fitted")
        points = self.transformed_points()
        with open(path, "w", encoding="utf-8") as out:
            out.write("Point,X,Y\n")
            for i, (x, y) in enumerate(points, start=1):
                out.write(f"P{i},{x:g},{y:g}\n")
            for i, (x, y) in enumerate(self.net_points[:2], start=1):
                out.write(f"NetPole{i},{x:g},{y:g}\n")