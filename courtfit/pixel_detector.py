"""Detection of pixels that belong to bright, thin court lines."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from scipy import ndimage

from courtfit.line import BG_VALUE, FG_VALUE
from courtfit.timing import timer


@dataclass
class PixelDetectorParameters:
    """Tuning values of the line pixel detector."""

    threshold: int = 80
    diff_threshold: int = 20
    t: int = 4
    gradient_kernel_size: int = 3
    kernel_size: int = 21


def _binomial(n: int) -> np.ndarray:
    kernel = np.array([1.0])
    for _ in range(n - 1):
        kernel = np.convolve(kernel, [1.0, 1.0])
    return kernel


def _sobel(image: np.ndarray, axis: int, ksize: int) -> np.ndarray:
    if ksize < 3 or ksize % 2 == 0:
        raise ValueError("gradient kernel size must be odd and at least 3")
    smooth = _binomial(ksize)
    deriv = np.convolve(_binomial(ksize - 1), [1.0, -1.0])[::-1]
    out = ndimage.correlate1d(image, deriv, axis=axis, mode="mirror")
    return ndimage.correlate1d(out, smooth, axis=1 - axis, mode="mirror")


@dataclass
class CourtLinePixelDetector:
    """Marks pixels that are brighter than their neighbours at a fixed offset."""

    parameters: PixelDetectorParameters = field(default_factory=PixelDetectorParameters)

    def run(self, frame: np.ndarray) -> np.ndarray:
        """Binary image of court line pixels in ``frame``."""
        with timer.measure("CourtLinePixelDetector::run"):
            luminance = self.luminance(frame)
            image = self.detect_line_pixels(luminance)
            return self.filter_line_pixels(image, luminance)

    def luminance(self, frame: np.ndarray) -> np.ndarray:
        """The first channel of ``frame`` as an 8-bit image."""
        frame = np.asarray(frame)
        channel = frame if frame.ndim == 2 else frame[..., 0]
        return np.ascontiguousarray(channel, dtype=np.uint8)

    def detect_line_pixels(self, image: np.ndarray) -> np.ndarray:
        """Pixels bright enough and brighter than both neighbours on one axis."""
        p = self.parameters
        rows, cols = image.shape
        out = np.full((rows, cols), BG_VALUE, dtype=np.uint8)
        t = p.t
        if rows <= 2 * t or cols <= 2 * t:
            return out
        img = image.astype(np.int32)
        value = img[t : rows - t, t : cols - t]
        top = img[: rows - 2 * t, t : cols - t]
        bottom = img[2 * t :, t : cols - t]
        left = img[t : rows - t, : cols - 2 * t]
        right = img[t : rows - t, 2 * t :]
        d = p.diff_threshold
        horizontal = (value - left > d) & (value - right > d)
        vertical = (value - top > d) & (value - bottom > d)
        mask = (value >= p.threshold) & (horizontal | vertical)
        out[t : rows - t, t : cols - t][mask] = FG_VALUE
        return out

    def filter_line_pixels(
        self, binary_image: np.ndarray, luminance_image: np.ndarray
    ) -> np.ndarray:
        """Keep line pixels whose structure tensor has one dominant direction."""
        dx2, dxy, dy2 = self.structure_tensor(luminance_image)
        half_trace = (dx2 + dy2) / 2.0
        radius = np.sqrt(((dx2 - dy2) / 2.0) ** 2 + dxy**2)
        largest = half_trace + radius
        smallest = half_trace - radius
        keep = (binary_image == FG_VALUE) & (largest > 4 * smallest)
        out = np.full(binary_image.shape, BG_VALUE, dtype=np.uint8)
        out[keep] = FG_VALUE
        return out

    def structure_tensor(self, image: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Box-summed products of the image gradients: ``dx2, dxy, dy2``."""
        p = self.parameters
        data = np.asarray(image, dtype=np.float32)
        sigma = 0.3 * ((5 - 1) * 0.5 - 1) + 0.8
        blurred = ndimage.gaussian_filter(data, sigma, mode="mirror", truncate=2.0 / sigma)
        dx = _sobel(blurred, 1, p.gradient_kernel_size)
        dy = _sobel(blurred, 0, p.gradient_kernel_size)
        k = p.kernel_size
        area = float(k * k)

        def box(a: np.ndarray) -> np.ndarray:
            return ndimage.uniform_filter(a, size=k, mode="mirror") * area

        return box(dx * dx), box(dx * dy), box(dy * dy)