[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pixedit"
version = "0.1.0"
description = "Building blocks of a modal pixel-art editor: brushes, flood fill, path completion and session recording/replay"
requires-python = ">=3.10"
dependencies = [
    "pillow",
]
keywords = ["pixel-art", "editor", "sprite", "brush", "flood-fill", "replay", "completion"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Editors :: Raster-Based",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["pixedit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
