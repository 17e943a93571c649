[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "iavl"
version = "0.1.0"
description = "Building blocks for a versioned AVL+ key-value store: varint encoding, LRU node cache, fast nodes, export compression and in-memory key-value databases."
requires-python = ">=3.10"
dependencies = [
    "sortedcontainers",
]
keywords = ["avl", "merkle", "key-value", "database", "varint", "lru-cache"]
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
    "Topic :: Database :: Database Engines/Servers",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["iavl"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
