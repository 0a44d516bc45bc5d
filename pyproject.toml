[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "annokit"
version = "0.1.0"
description = "Multiplayer networking and isometric software rendering for an Anno 1602 style engine"
requires-python = ">=3.10"
keywords = ["anno", "isometric", "multiplayer", "game-engine", "sprites", "rle"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment :: Real Time Strategy",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["annokit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
