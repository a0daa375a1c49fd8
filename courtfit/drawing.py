"""Drawing and display helpers for images held as numpy arrays."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np
from PIL import Image, ImageDraw

from courtfit.line import Line

DEFAULT_COLOR = (0, 0, 255)


def _fill(image: np.ndarray, color: Sequence[int]) -> int | tuple[int, ...]:
    if image.ndim == 2:
        return int(color[0])
    channels = image.shape[2]
    return tuple(int(c) for c in list(color)[:channels])


def _paint(image: np.ndarray, paint) -> None:
    canvas = Image.fromarray(image)
    paint(ImageDraw.Draw(canvas))
    image[...] = np.asarray(canvas)


def draw_segment(
    start: Sequence[float],
    end: Sequence[float],
    image: np.ndarray,
    color: Sequence[int] = DEFAULT_COLOR,
    thickness: int = 2,
) -> None:
    """Draw the segment from ``start`` to ``end`` onto ``image`` in place."""
    fill = _fill(image, color)
    coords = [(float(start[0]), float(start[1])), (float(end[0]), float(end[1]))]
    _paint(image, lambda draw: draw.line(coords, fill=fill, width=thickness))


def draw_line(
    line: Line,
    image: np.ndarray,
    color: Sequence[int] = DEFAULT_COLOR,
    thickness: int = 2,
) -> None:
    """Draw an infinite line across ``image`` in place."""
    rows, cols = image.shape[:2]
    top = Line((0, 0), (1, 0))
    left = Line((0, 0), (0, 1))
    bottom = Line((cols, rows), (1, 0))
    right = Line((cols, rows), (0, 1))

    p1, p2 = line.intersection(top), line.intersection(bottom)
    if p1 is None or p2 is None:
        p1, p2 = line.intersection(left), line.intersection(right)
        if p1 is None or p2 is None:
            raise ValueError("No intersections found!")
    draw_segment(p1, p2, image, color, thickness)


def draw_lines(
    lines: Iterable[Line],
    image: np.ndarray,
    color: Sequence[int] = DEFAULT_COLOR,
    thickness: int = 2,
) -> None:
    """Draw every line onto ``image`` in place."""
    for line in lines:
        draw_line(line, image, color, thickness)


def draw_point(
    point: Sequence[float], image: np.ndarray, color: Sequence[int] = DEFAULT_COLOR
) -> None:
    """Draw a filled dot of radius 3 at ``point``."""
    fill = _fill(image, color)
    x, y = float(point[0]), float(point[1])
    box = [x - 3, y - 3, x + 3, y + 3]
    _paint(image, lambda draw: draw.ellipse(box, fill=fill))


def draw_points(
    points: Iterable[Sequence[float]],
    image: np.ndarray,
    color: Sequence[int] = DEFAULT_COLOR,
) -> None:
    """Draw a dot at each point."""
    for point in points:
        draw_point(point, image, color)


def display_image(window_name: str, image: np.ndarray) -> None:
    """Show ``image`` in a window and wait until it is closed."""
    import matplotlib.pyplot as plt

    fig = plt.figure(window_name)
    if image.ndim == 2:
        plt.imshow(image, cmap="gray")
    else:
        plt.imshow(image)
    plt.axis("off")
    plt.show()
    plt.close(fig)


def write_image(path: str, image: np.ndarray) -> None:
    """Write ``image`` to ``path``; the format follows the file extension."""
    import imageio.v3 as iio

    iio.imwrite(path, image)