"""Badminton court detection: line pixels, candidate lines, court model fitting and a command line."""

__version__ = "0.1.0"

__all__ = [
    "candidate_detector",
    "cli",
    "court_model",
    "drawing",
    "fitter",
    "geometry",
    "line",
    "pixel_detector",
    "timing",
]