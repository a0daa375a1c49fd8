"""Search for the badminton court model that best explains a set of candidate lines."""

from __future__ import annotations

import enum
import logging
import math
import random
from collections.abc import Callable, Sequence

import numpy as np

from courtfit.court_model import BadmintonCourtModel, LinePair, get_possible_line_pairs
from courtfit.drawing import display_image, draw_line, draw_lines
from courtfit.geometry import sort_lines_by_line_intersections
from courtfit.line import INITIAL_FIT_SCORE, Line
from courtfit.timing import timer

logger = logging.getLogger(__name__)

WINDOW_NAME = "BadmintonCourtFitter"

MIN_SCORE = 2 * 1600
GOOD_SCORE = 2 * 2100
RANDOM_TRIALS = 24
COLOURING_TRIALS = 42
SWAP_ROUNDS = 9
NET_WEIGHT = 1e-2


class SplitMode(enum.Enum):
    """How candidate lines are split into horizontal and vertical groups."""

    RANDOM = 0
    OPTIMIZE = 1


def sort_horizontal_lines(lines: Sequence[Line], shape: Sequence[int]) -> list[Line]:
    """Horizontal lines ordered from the bottom of an image of ``shape`` upwards."""
    rows, cols = int(shape[0]), int(shape[1])
    reference = Line.from_two_points((cols // 2, rows), (0, 1))
    return sort_lines_by_line_intersections(lines, reference)


def sort_vertical_lines(lines: Sequence[Line], shape: Sequence[int]) -> list[Line]:
    """Vertical lines ordered from the left of an image of ``shape``."""
    rows = int(shape[0])
    reference = Line.from_two_points((0, rows // 2), (1, 0))
    return sort_lines_by_line_intersections(lines, reference)


def _split_sums(row: np.ndarray, differs: np.ndarray, mask: np.ndarray) -> tuple[float, float]:
    return float(row[mask & ~differs].sum()), float(row[mask & differs].sum())


class BadmintonCourtFitter:
    """Tries every pairing of candidate lines against the court model and keeps the best."""

    def __init__(self, *, debug: bool = False, rng: random.Random | None = None) -> None:
        self.debug = debug
        self.rng = rng if rng is not None else random.Random()
        self.best_model = BadmintonCourtModel()
        self.best_score = INITIAL_FIT_SCORE
        self._debug_image: np.ndarray | None = None

    def run(
        self,
        lines: Sequence[Line],
        binary_image: np.ndarray,
        rgb_image: np.ndarray | None = None,
    ) -> BadmintonCourtModel:
        """The court model that fits ``lines`` and ``binary_image`` best."""
        self._debug_image = rgb_image
        with timer.measure("BadmintonCourtFitter::run"):
            self.best_score = INITIAL_FIT_SCORE
            with timer.measure("\tfindBestModelFit (optimization mode)"):
                self.find_best_model_fit(lines, binary_image, SplitMode.OPTIMIZE)
            logger.info("Current best model score: %s", self.best_score)

            if self.best_score < MIN_SCORE:
                logger.info(
                    "Fit scores in default-mode too low. "
                    "Trying more time-intensive computations..."
                )
                with timer.measure("\tfindBestModelFit (random mode)"):
                    for trial in range(RANDOM_TRIALS):
                        self.find_best_model_fit(lines, binary_image, SplitMode.RANDOM)
                        if trial % 5 == 0:
                            logger.info(
                                "Iteration %d, current best model score: %s",
                                trial,
                                self.best_score,
                            )
                        if self.best_score >= GOOD_SCORE:
                            break
        return self.best_model

    def split_lines(
        self, lines: Sequence[Line], mode: SplitMode = SplitMode.OPTIMIZE
    ) -> tuple[list[Line], list[Line]]:
        """Split ``lines`` into ``(horizontal, vertical)`` groups."""
        lines = list(lines)
        if mode is SplitMode.RANDOM:
            colours = [self.rng.randrange(2) for _ in lines]
        else:
            colours = self._optimal_colouring(lines)

        h_lines = [line for line, c in zip(lines, colours) if c]
        v_lines = [line for line, c in zip(lines, colours) if not c]

        if self.debug:
            logger.info("Horizontal lines = %d", len(h_lines))
            logger.info("Vertical lines = %d", len(v_lines))

            def paint(image: np.ndarray) -> None:
                draw_lines(h_lines, image, (255, 0, 0))
                draw_lines(v_lines, image, (0, 255, 0))

            self._show(paint)
        return h_lines, v_lines

    def find_best_model_fit(
        self,
        lines: Sequence[Line],
        binary_image: np.ndarray,
        mode: SplitMode = SplitMode.OPTIMIZE,
    ) -> None:
        """Update the best model with every pairing of the split lines."""
        lines = list(lines)
        shape = binary_image.shape[:2]
        h_lines, v_lines = self.split_lines(lines, mode)

        for flip in (False, True):
            if flip:
                h_lines, v_lines = v_lines, h_lines
            h_lines = sort_horizontal_lines(h_lines, shape)
            v_lines = sort_vertical_lines(v_lines, shape)

            h_pairs = get_possible_line_pairs(h_lines)
            v_pairs = get_possible_line_pairs(v_lines)
            if self.debug:
                logger.info("Horizontal line pairs = %d", len(h_pairs))
                logger.info("Vertical line pairs = %d", len(v_pairs))
            if not h_pairs or not v_pairs:
                raise RuntimeError("Not enough line candidates were found.")

            for h_pair in h_pairs:
                for v_pair in v_pairs:
                    self._try_pairing(h_pair, v_pair, lines, binary_image)

        if self.debug:
            logger.info("Best model score = %s", self.best_score)
            if self.best_model.transformation_matrix is not None:
                self._show(self.best_model.draw)

    def _try_pairing(
        self,
        h_pair: LinePair,
        v_pair: LinePair,
        lines: list[Line],
        binary_image: np.ndarray,
    ) -> None:
        model = BadmintonCourtModel()
        score = model.fit(h_pair, v_pair, binary_image)
        net_score = 0.0
        if score > INITIAL_FIT_SCORE:
            net_score = model.fit_net(lines, binary_image)

        total = score + NET_WEIGHT * net_score
        if total <= self.best_score:
            return
        self.best_score = total
        self.best_model = model
        logger.info("Score breakdown: %s %s", score, net_score)
        if self.debug:

            def paint(image: np.ndarray) -> None:
                for line in (*h_pair, *v_pair):
                    draw_line(line, image, (255, 0, 0))

            self._show(paint)
            self._show(model.draw)

    def _optimal_colouring(self, lines: list[Line]) -> list[int]:
        n = len(lines)
        angles = np.array(
            [[a.angle_to(b) for b in lines] for a in lines], dtype=np.float64
        ).reshape(n, n)
        best: np.ndarray | None = None
        best_cost = 1e99
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            weights = 1.0 / (1.0 - 2.0 * angles / math.pi) ** 2 - 1.0
            for _ in range(COLOURING_TRIALS):
                colour, cost = self._local_search(weights)
                if cost < best_cost:
                    best_cost = cost
                    best = colour
                elif best is None:
                    best = colour
        logger.info("Minimum conflict achieved: %s", best_cost)
        return [] if best is None else [int(c) for c in best]

    def _local_search(self, weights: np.ndarray) -> tuple[np.ndarray, float]:
        n = len(weights)
        colour = np.array([self.rng.randrange(2) for _ in range(n)], dtype=np.int8)
        others = np.ones(n, dtype=bool)
        conflicts = 1e99
        while True:
            for _ in range(SWAP_ROUNDS):
                swapped = False
                for i in range(n):
                    for j in range(n):
                        if colour[i] == colour[j]:
                            continue
                        others[:] = True
                        others[[i, j]] = False
                        ci0, ci1 = _split_sums(weights[i], colour != colour[i], others)
                        cj0, cj1 = _split_sums(weights[j], colour != colour[j], others)
                        if ci1 + cj1 - ci0 - cj0 < 0:
                            colour[i] ^= 1
                            colour[j] ^= 1
                            swapped = True
                if not swapped:
                    break

            for i in range(n):
                differs = colour != colour[i]
                if weights[i][~differs].sum() > weights[i][differs].sum():
                    colour[i] ^= 1

            same = colour[:, None] == colour[None, :]
            new_conflicts = float(weights[same].sum())
            if new_conflicts < conflicts:
                conflicts = new_conflicts
            else:
                break
        return colour, conflicts

    def _show(self, paint: Callable[[np.ndarray], None]) -> None:
        if self._debug_image is None:
            return
        image = np.array(self._debug_image, copy=True)
        paint(image)
        display_image(WINDOW_NAME, image)