import numpy as np
import pytest
import imageio.v3 as iio

from courtfit.drawing import (
    draw_line,
    draw_lines,
    draw_point,
    draw_points,
    draw_segment,
    write_image,
)
from courtfit.line import Line


def test_draw_segment_marks_endpoints_and_middle():
    image = np.zeros((20, 20), dtype=np.uint8)
    draw_segment((2, 5), (15, 5), image, (255,), 1)
    assert image[5, 2] == 255
    assert image[5, 10] == 255
    assert image[5, 15] == 255
    assert image[10, 10] == 0


def test_draw_line_spans_whole_image():
    image = np.zeros((20, 30, 3), dtype=np.uint8)
    draw_line(Line((0, 8), (1, 0)), image, (1, 2, 3), 1)
    assert tuple(image[8, 0]) == (1, 2, 3)
    assert tuple(image[8, 29]) == (1, 2, 3)
    assert image[0].sum() == 0


def test_draw_vertical_line():
    image = np.zeros((20, 30), dtype=np.uint8)
    draw_lines([Line((7, 0), (0, 1))], image, (200,), 1)
    assert image[0, 7] == 200
    assert image[19, 7] == 200


def test_draw_line_without_intersections_raises():
    image = np.zeros((10, 10), dtype=np.uint8)
    with pytest.raises(ValueError):
        draw_line(Line((1, 1), (0, 0)), image)


def test_draw_points_fills_dots():
    image = np.zeros((30, 30), dtype=np.uint8)
    draw_points([(5, 5), (20, 20)], image, (9,))
    assert image[5, 5] == 9
    assert image[20, 20] == 9
    assert image[12, 12] == 0


def test_draw_point_single():
    image = np.zeros((10, 10, 3), dtype=np.uint8)
    draw_point((5, 5), image, (0, 255, 0))
    assert tuple(image[5, 5]) == (0, 255, 0)


def test_write_image_round_trip(tmp_path):
    image = np.zeros((8, 9, 3), dtype=np.uint8)
    image[2, 3] = (10, 20, 30)
    path = tmp_path / "out.png"
    write_image(str(path), image)
    loaded = iio.imread(path)
    assert np.array_equal(loaded, image)