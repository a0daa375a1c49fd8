# courtfit

Finds a badminton court in a video. One frame is picked at random from the
middle 60% of the file, and four steps run on it:

1. **Line pixels.** `courtfit.pixel_detector.CourtLinePixelDetector` works on
   the first channel of the frame it is given. It marks pixels that are bright
   (at least 80) and brighter, by more than 20, than both neighbours four
   pixels away along one axis. It then keeps only the pixels whose structure
   tensor has one clearly dominant direction.
2. **Candidate lines.** `courtfit.candidate_detector.CourtLineCandidateDetector`
   runs a probabilistic Hough transform (`hough_lines_p`) on those pixels. It
   refits each line to the white pixels within 8 pixels of it (`fit_line`),
   and merges near-duplicate lines (`remove_duplicate_lines`). The refit and
   merge steps repeat 50 times.
3. **Court fit.** `courtfit.fitter.BadmintonCourtFitter` splits the candidates
   into horizontal and vertical groups. It does this by local search over a
   two-colouring that keeps lines at sharp angles to each other apart, and it
   falls back to random splits when the score stays low. For each pair of
   lines in one group and each pair in the other, it computes a perspective
   transform from the standard court model
   (`courtfit.court_model.BadmintonCourtModel`). Each transform is scored by
   how well the projected court lines land on detected line pixels.
4. **Net.** `BadmintonCourtModel.fit_net` looks at candidate lines that run
   roughly parallel to the net line and lie between 5% and 40% of the image
   height above it. Each one is scored as the top of the net, and the best
   one gives the two net posts.

## Installation

```
pip install .
```

Frames are read with `imageio`. Still images work out of the box. Video files
need an imageio plugin that can read them, such as `imageio-ffmpeg` or `av`,
installed alongside.

## Command line

```
courtfit VIDEO [OUTPUT_CSV [OUTPUT_IMAGE]]
```

- With only `VIDEO`, the fitted court is drawn in yellow on the frame and
  shown in a matplotlib window.
- With `OUTPUT_CSV`, the fitted points are written to that file. These are the
  22 projected court points `P1`…`P22` and the net poles `NetPole1` and
  `NetPole2`, one per row under the header `Point,X,Y`.
- With `OUTPUT_IMAGE` as well, the frame with the court drawn on it is also
  saved to that path.

Progress and score messages are printed, and log records go out through the
`logging` module at INFO level.

Exit codes:

| Code | Meaning |
|------|---------|
| 0 | success |
| 1 | the file could not be opened |
| 2 | the chosen frame could not be read |
| 3 | processing failed, for example too few line candidates, or no net found when writing the CSV |

## Library use

```python
from courtfit.cli import read_frame
from courtfit.pixel_detector import CourtLinePixelDetector
from courtfit.candidate_detector import CourtLineCandidateDetector
from courtfit.fitter import BadmintonCourtFitter

frame, index = read_frame("match.mp4")
binary = CourtLinePixelDetector().run(frame)
lines = CourtLineCandidateDetector().run(binary, frame)
model = BadmintonCourtFitter().run(lines, binary, frame)
print(model.transformed_points())
model.write_csv("court.csv")
```

`read_frame` returns the frame as an RGB `uint8` array, together with its
index. The command line reverses the channel order before it runs the pixel
detector.

The main objects are:

- `courtfit.line.Line`: an infinite line, given by a point and a unit
  direction. It provides intersection, distance, projection, and duplicate
  and parallel tests.
- `courtfit.geometry`: helpers for vectors, segment crossing (`seg_x_seg`),
  areas, and line sorting.
- `courtfit.court_model`: the court model, plus the helpers
  `perspective_matrix`, `apply_perspective`, `is_convex`,
  `point_polygon_distance`, `score_segment`, `remove_segment`, and
  `prune_segment`.
- `courtfit.fitter`: `BadmintonCourtFitter`, with `SplitMode.OPTIMIZE` or
  `SplitMode.RANDOM` for the horizontal/vertical split.
- `courtfit.drawing`: draws lines, segments, and points onto numpy images in
  place, and provides `display_image` and `write_image`.
- `courtfit.timing`: `Timer`, which has `start`, `stop`, and a `measure`
  context manager, plus the shared `timer` instance that the detectors use.

## What it does not do

- Each run looks at one frame only. No court is tracked across the video.
- Everything runs in Python and numpy, including the Hough transform, so a
  full-HD frame can take a while.

## Tests

```
pip install .[test]
pytest
```