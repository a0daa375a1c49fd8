[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "courtfit"
version = "0.1.0"
description = "Detect badminton court lines and the net in a video frame and fit a court model to them"
requires-python = ">=3.10"
keywords = ["badminton", "court detection", "computer vision", "homography", "hough transform"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Recognition",
]
dependencies = [
    "numpy",
    "scipy",
    "pillow",
    "imageio",
    "matplotlib",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
courtfit = "courtfit.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["courtfit"]

[tool.pytest.ini_options]
addopts = "-ra"
