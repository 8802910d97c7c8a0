[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dloom"
version = "1.0.0"
description = "In-memory model of a constant-product AMM and a discretized liquidity market maker, with exact integer math"
requires-python = ">=3.10"
dependencies = []
keywords = ["amm", "dlmm", "liquidity", "swap", "market-maker", "fees"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dloom"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
