[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rmdbkit"
version = "0.1.0"
description = "Catalogue metadata, system manager, result printing and two-phase locking for a small relational database engine"
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "catalog", "metadata", "transactions", "locking", "two-phase-locking"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rmdbkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
