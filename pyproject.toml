[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pagekernel"
version = "0.1.0"
description = "A small kernel model: bitmaps, process control blocks, open-file tables and demand-paged virtual memory with second-chance replacement"
requires-python = ">=3.10"
dependencies = []
keywords = ["kernel", "virtual memory", "paging", "swap", "operating systems", "education"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System Kernels",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pagekernel"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
