"""Extraction and refinement of candidate court lines from a binary image."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from courtfit.line import FG_VALUE, Line
from courtfit.timing import timer

Segment = tuple[int, int, int, int]


@dataclass
class CandidateDetectorParameters:
    """Tuning values of the candidate line detector."""

    hough_threshold: int = 50
    distance_threshold: int = 8
    refinement_iterations: int = 50


def hough_lines_p(
    image: np.ndarray,
    rho: float,
    theta: float,
    threshold: int,
    min_line_length: int,
    max_line_gap: int,
    rng: np.random.Generator | None = None,
) -> list[Segment]:
    """Probabilistic Hough transform returning segments ``(x1, y1, x2, y2)``."""
    rng = rng if rng is not None else np.random.default_rng()
    height, width = image.shape
    irho = 1.0 / rho
    num_angle = int(round(math.pi / theta))
    num_rho = int(round(((width + height) * 2 + 1) / rho))
    offset = (num_rho - 1) // 2
    angles = np.arange(num_angle) * theta
    cos_t = np.cos(angles) * irho
    sin_t = np.sin(angles) * irho
    angle_idx = np.arange(num_angle)

    acc = np.zeros((num_angle, num_rho), dtype=np.int32)
    mask = image != 0
    points = np.argwhere(mask)
    rng.shuffle(points)
    shift = 16
    half = 1 << (shift - 1)
    segments: list[Segment] = []

    def rho_index(x: int, y: int) -> np.ndarray:
        return np.rint(x * cos_t + y * sin_t).astype(np.int64) + offset

    for i, j in points:
        i, j = int(i), int(j)
        if not mask[i, j]:
            continue
        r = rho_index(j, i)
        acc[angle_idx, r] += 1
        votes = acc[angle_idx, r]
        best = int(np.argmax(votes))
        if votes[best] < threshold:
            continue

        a = -sin_t[best]
        b = cos_t[best]
        x0, y0 = j, i
        if abs(a) > abs(b):
            xflag = True
            dx0 = 1 if a > 0 else -1
            dy0 = int(round(b * (1 << shift) / abs(a)))
            y0 = (y0 << shift) + half
        else:
            xflag = False
            dy0 = 1 if b > 0 else -1
            dx0 = int(round(a * (1 << shift) / abs(b)))
            x0 = (x0 << shift) + half

        def walk(k: int):
            dx, dy = (dx0, dy0) if k == 0 else (-dx0, -dy0)
            x, y = x0, y0
            while True:
                if xflag:
                    j1, i1 = x, y >> shift
                else:
                    j1, i1 = x >> shift, y
                if j1 < 0 or j1 >= width or i1 < 0 or i1 >= height:
                    return
                yield j1, i1
                x += dx
                y += dy

        ends = [(j, i), (j, i)]
        for k in range(2):
            gap = 0
            for j1, i1 in walk(k):
                if mask[i1, j1]:
                    gap = 0
                    ends[k] = (j1, i1)
                else:
                    gap += 1
                    if gap > max_line_gap:
                        break

        good = (
            abs(ends[1][0] - ends[0][0]) >= min_line_length
            or abs(ends[1][1] - ends[0][1]) >= min_line_length
        )

        for k in range(2):
            for j1, i1 in walk(k):
                if mask[i1, j1]:
                    if good:
                        acc[angle_idx, rho_index(j1, i1)] -= 1
                    mask[i1, j1] = False
                if (j1, i1) == ends[k]:
                    break

        if good:
            segments.append((ends[0][0], ends[0][1], ends[1][0], ends[1][1]))
    return segments


def fit_line(points: np.ndarray) -> tuple[tuple[float, float], tuple[float, float]]:
    """Least-squares line through ``points``: ``(direction, centroid)``."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if len(pts) < 2:
        raise ValueError("at least two points are needed to fit a line")
    xm, ym = pts.mean(axis=0)
    dx2 = float(np.mean(pts[:, 0] ** 2) - xm * xm)
    dy2 = float(np.mean(pts[:, 1] ** 2) - ym * ym)
    dxy = float(np.mean(pts[:, 0] * pts[:, 1]) - xm * ym)
    t = math.atan2(2 * dxy, dx2 - dy2) / 2
    return (math.cos(t), math.sin(t)), (float(xm), float(ym))


def remove_duplicate_lines(lines: list[Line]) -> list[Line]:
    """Merge groups of near-identical lines into their averages."""
    groups: list[list[Line]] = []
    assigned = [False] * len(lines)
    for i, line in enumerate(lines):
        if assigned[i]:
            continue
        assigned[i] = True
        group = [line]
        for j in range(i + 1, len(lines)):
            if line.is_duplicate(lines[j]):
                assigned[j] = True
                group.append(lines[j])
        groups.append(group)

    merged = []
    for group in groups:
        n = len(group)
        point = (sum(g.point[0] for g in group) / n, sum(g.point[1] for g in group) / n)
        vector = (sum(g.vector[0] for g in group) / n, sum(g.vector[1] for g in group) / n)
        merged.append(Line(point, vector, normalized=False))
    return merged


@dataclass
class CourtLineCandidateDetector:
    """Finds straight lines in a binary image and refines them."""

    parameters: CandidateDetectorParameters = field(default_factory=CandidateDetectorParameters)
    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    def run(self, binary_image: np.ndarray, rgb_image: np.ndarray | None = None) -> list[Line]:
        """Candidate court lines of ``binary_image``."""
        with timer.measure("CourtLineCandidateDetector::run"):
            lines = self.extract_lines(binary_image)
            rows, cols = np.nonzero(binary_image == FG_VALUE)
            white_pixels = np.column_stack([cols, rows]).astype(np.float64)
            for _ in range(self.parameters.refinement_iterations):
                lines = self.refine_lines(lines, white_pixels)
                lines = remove_duplicate_lines(lines)
            return lines

    def extract_lines(self, binary_image: np.ndarray) -> list[Line]:
        """Lines through the segments of the probabilistic Hough transform."""
        segments = hough_lines_p(
            binary_image, 1, math.pi / 180, self.parameters.hough_threshold, 50, 10, self.rng
        )
        return [Line.from_two_points((x1, y1), (x2, y2)) for x1, y1, x2, y2 in segments]

    def refine_lines(self, lines: list[Line], white_pixels: np.ndarray) -> list[Line]:
        """Each line refitted to the white pixels near it."""
        return [self.refine_line(line, white_pixels) for line in lines]

    def refine_line(self, line: Line, white_pixels: np.ndarray) -> Line:
        """The line refitted to the white pixels near it."""
        direction, centroid = fit_line(self.close_points(line, white_pixels))
        return Line(centroid, direction)

    def close_points(self, line: Line, white_pixels: np.ndarray) -> np.ndarray:
        """White pixels closer to ``line`` than the distance threshold."""
        pts = np.asarray(white_pixels, dtype=np.float64).reshape(-1, 2)
        u = np.array(line.point)
        v = np.array(line.vector)
        t = (pts - u) @ v
        proj = u + t[:, None] * v
        dist = np.hypot(*(pts - proj).T)
        return pts[dist < self.parameters.distance_threshold]