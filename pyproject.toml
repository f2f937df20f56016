[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "goestools"
version = "0.1.0"
description = "Building blocks for GOES LRIT/HRIT reception: LRIT header parsing, demodulator DSP blocks, receiver configuration and statistics monitoring"
requires-python = ">=3.11"
dependencies = [
    "numpy",
]
keywords = ["goes", "lrit", "hrit", "satellite", "weather", "sdr", "dsp", "statsd"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Atmospheric Science",
    "Topic :: Communications :: Ham Radio",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["goestools"]

[tool.hatch.build.targets.sdist]
include = ["goestools", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true
