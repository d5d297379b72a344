[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "snapcraft"
version = "0.1.0"
description = "Content-addressed backup repository, snapshot retention and restore helpers for Minecraft worlds"
requires-python = ">=3.10"
keywords = ["backup", "minecraft", "snapshot", "deduplication", "chunking", "retention"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving :: Backup",
]
dependencies = [
    "zstandard",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["snapcraft"]

[tool.pytest.ini_options]
addopts = "-ra"
