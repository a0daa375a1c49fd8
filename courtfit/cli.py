"""Command line entry point: find the court in one frame of a video or image."""

from __future__ import annotations

import argparse
import itertools
import logging
import random
import sys
from collections.abc import Sequence

import imageio.v3 as iio
import numpy as np

from courtfit.candidate_detector import CourtLineCandidateDetector
from courtfit.drawing import display_image, write_image
from courtfit.fitter import BadmintonCourtFitter
from courtfit.pixel_detector import CourtLinePixelDetector
from courtfit.timing import timer

# The court is drawn yellow on an RGB frame.
_COURT_COLOR = (255, 255, 0)


def _as_rgb(frame: np.ndarray) -> np.ndarray:
    arr = np.asarray(frame)
    if arr.dtype != np.uint8:
        arr = np.clip(arr, 0, 255).astype(np.uint8)
    if arr.ndim == 2:
        arr = np.stack([arr] * 3, axis=-1)
    elif arr.shape[-1] == 1:
        arr = np.repeat(arr, 3, axis=-1)
    elif arr.shape[-1] == 4:
        arr = arr[..., :3]
    return np.ascontiguousarray(arr)


def read_frame(path: str, rng: random.Random | None = None) -> tuple[np.ndarray, int]:
    """A random frame from the middle 60% of the file at ``path``, with its index."""
    rng = rng if rng is not None else random.Random()
    try:
        total = sum(1 for _ in iio.imiter(path))
    except (OSError, ValueError) as exc:
        raise OSError(f"Cannot open file {path}") from exc

    start, end = int(total * 0.2), int(total * 0.8)
    index = start + rng.randrange(end - start) if end > start else start
    frame = next(itertools.islice(iio.imiter(path), index, None), None)
    if frame is None:
        raise LookupError(f"Failed to read frame with index {index}")
    return _as_rgb(frame), index


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="courtfit", description="Detect a badminton court in a video frame."
    )
    parser.add_argument("video_path", help="path to an input video or image file")
    parser.add_argument(
        "output_path",
        nargs="?",
        help="file where the xy court point coordinates will be written; "
        "if absent, a window with the result is opened",
    )
    parser.add_argument(
        "output_image_path",
        nargs="?",
        help="file where the image with the court drawn on it will be written",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the detector on one frame and report or save the court."""
    args = _parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    print(f"Reading file {args.video_path}")
    try:
        frame, index = read_frame(args.video_path)
    except OSError:
        print(f"Cannot open file {args.video_path}", file=sys.stderr)
        return 1
    except LookupError as exc:
        print(exc, file=sys.stderr)
        return 2
    rows, cols = frame.shape[:2]
    print(f"Frame properties (w: {cols}, h: {rows})")
    print(f"Reading frame with index {index}")

    print("Starting court line detection algorithm...")
    try:
        timer.start("LineDetection")
        bgr = frame[..., ::-1]
        binary_image = CourtLinePixelDetector().run(bgr)
        candidates = CourtLineCandidateDetector().run(binary_image, bgr)
        model = BadmintonCourtFitter().run(candidates, binary_image, frame)
        elapsed = int(timer.stop("LineDetection"))
        print(f"Elapsed time: {elapsed}s.")

        if args.output_path is None:
            model.draw(frame, _COURT_COLOR)
            display_image("Result - press key to exit", frame)
        else:
            model.write_csv(args.output_path)
            print(f"Result written to {args.output_path}")
        if args.output_image_path is not None:
            model.draw(frame, _COURT_COLOR)
            write_image(args.output_image_path, frame)
    except (RuntimeError, ValueError) as exc:
        print(f"Processing error: {exc}")
        return 3
    return 0


if __name__ == "__main__":
    sys.exit(main())