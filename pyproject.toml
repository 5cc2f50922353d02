[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fck"
version = "0.1.0"
description = "File check toolkit: hash files, measure sizes, compare directories and find files."
requires-python = ">=3.10"
dependencies = []
keywords = ["checksum", "hash", "md5", "sha256", "find", "disk usage", "compare"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: System Administrators",
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
fck = "fck.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["fck"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
