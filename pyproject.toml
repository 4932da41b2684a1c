[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "groupmixer"
version = "0.1.0"
description = "Assign people to groups across sessions so that they meet as many others as possible, using simulated annealing."
requires-python = ">=3.10"
keywords = ["scheduling", "simulated annealing", "optimization", "group assignment", "social golfer"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
    "Topic :: Office/Business :: Scheduling",
]
dependencies = [
    "flask",
    "tqdm",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
groupmixer-server = "groupmixer.server.app:main"
groupmixer-legacy = "groupmixer.legacy.runner:main"

[tool.hatch.build.targets.wheel]
packages = ["groupmixer"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
