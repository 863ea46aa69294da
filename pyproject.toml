[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kudokit"
version = "0.1.0"
description = "Operator repository indexes, repository configuration, health checks and cluster helpers for KUDO operators"
requires-python = ">=3.10"
keywords = ["kubernetes", "operators", "kudo", "repository", "index", "health"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["kudokit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
