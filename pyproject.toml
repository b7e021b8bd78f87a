[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xquant"
version = "0.1.0"
description = "Automated trading toolkit: order execution algorithms, technical indicators, risk checks and backtesting"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "trading",
    "backtesting",
    "vwap",
    "twap",
    "iceberg",
    "trailing-stop",
    "technical-analysis",
    "indicators",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["xquant"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
