[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pointnorm"
version = "0.1.0"
description = "Normalization of cumulative metric data points with unknown or reset start times"
requires-python = ">=3.10"
dependencies = []
keywords = ["metrics", "monitoring", "normalization", "cumulative", "histogram", "telemetry"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pointnorm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
