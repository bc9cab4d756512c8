[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "extsort"
version = "0.1.0"
description = "External merge sort for binary files of keyed, variable-length records"
requires-python = ">=3.10"
dependencies = []
keywords = ["external sort", "merge sort", "records", "binary files", "batching"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
extsort = "extsort.sorter:main"
extsort-create-file = "extsort.tools:create_file_main"
extsort-read-file = "extsort.tools:read_file_main"

[tool.hatch.build.targets.wheel]
packages = ["extsort"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
