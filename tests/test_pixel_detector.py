import numpy as np

from courtfit.line import BG_VALUE, FG_VALUE
from courtfit.pixel_detector import CourtLinePixelDetector, PixelDetectorParameters


def _stripe_image():
    image = np.full((40, 40), 20, dtype=np.uint8)
    image[:, 19:22] = 200
    return image


def test_default_parameters():
    p = PixelDetectorParameters()
    assert (p.threshold, p.diff_threshold, p.t, p.gradient_kernel_size, p.kernel_size) == (
        80,
        20,
        4,
        3,
        21,
    )


def test_luminance_takes_first_channel():
    frame = np.zeros((4, 5, 3), dtype=np.uint8)
    frame[..., 0] = 7
    frame[..., 1] = 99
    lum = CourtLinePixelDetector().luminance(frame)
    assert lum.shape == (4, 5)
    assert np.all(lum == 7)


def test_detect_marks_stripe_not_background():
    out = CourtLinePixelDetector().detect_line_pixels(_stripe_image())
    assert out[20, 20] == FG_VALUE
    assert out[20, 5] == BG_VALUE
    assert out[1, 20] == BG_VALUE  # inside border margin


def test_detect_dark_stripe_ignored():
    image = 255 - _stripe_image()
    out = CourtLinePixelDetector().detect_line_pixels(image)
    assert out[20, 20] == BG_VALUE


def test_structure_tensor_constant_image_is_zero():
    dx2, dxy, dy2 = CourtLinePixelDetector().structure_tensor(np.full((30, 30), 50, np.uint8))
    assert np.allclose(dx2, 0) and np.allclose(dxy, 0) and np.allclose(dy2, 0)


def test_structure_tensor_vertical_stripe_dominated_by_dx():
    dx2, _, dy2 = CourtLinePixelDetector().structure_tensor(_stripe_image())
    assert dx2[20, 20] > dy2[20, 20]


def test_run_keeps_stripe_pixels_subset_of_detection():
    detector = CourtLinePixelDetector()
    frame = np.stack([_stripe_image()] * 3, axis=-1)
    result = detector.run(frame)
    raw = detector.detect_line_pixels(_stripe_image())
    assert result[20, 20] == FG_VALUE
    assert np.all(result[raw == BG_VALUE] == BG_VALUE)