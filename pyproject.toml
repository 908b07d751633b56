[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "collsim"
version = "0.1.0"
description = "Logical topologies, a latency-learning network backend wrapper, a memory model and greedy chunk scheduling for collective-communication simulation"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "simulation",
    "collective communication",
    "all-reduce",
    "ring",
    "binary tree",
    "topology",
    "scheduling",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
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
packages = ["collsim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
