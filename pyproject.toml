[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "apiaggregator"
version = "0.1.0"
description = "APIService registration types, ordering and condition helpers, versioned schemas, a scheme registry and validation for an API aggregation layer"
requires-python = ">=3.10"
dependencies = []
keywords = ["api", "aggregation", "apiservice", "validation", "scheme", "versioning"]
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
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["apiaggregator"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
