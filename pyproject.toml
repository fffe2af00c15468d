[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dirtjam"
version = "0.1.0"
description = "Endless procedurally generated terrain flythrough with a free-flying camera"
requires-python = ">=3.10"
keywords = ["terrain", "heightmap", "simplex", "fbm", "noise", "opengl", "procedural"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: X11 Applications",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
    "Topic :: Games/Entertainment :: Simulation",
]
dependencies = [
    "numpy",
    "pyglet",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
dirtjam = "dirtjam.app:main"

[tool.hatch.build.targets.wheel]
packages = ["dirtjam"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
