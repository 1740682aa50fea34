[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "phasemap"
version = "0.1.0"
description = "Batched event cuts, diagram topologies, channel-weight tables and PDF/alpha_s grid tables for collider phase-space sampling"
requires-python = ">=3.10"
keywords = ["phase space", "event generation", "monte carlo", "parton density", "feynman diagrams", "collider physics"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
    "numpy",
]

[tool.hatch.build.targets.wheel]
packages = ["phasemap"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
