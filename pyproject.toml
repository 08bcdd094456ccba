[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "labkit"
version = "0.1.0"
description = "Float and integer bit inspectors, data-lab reference answers, image-kernel benchmarking and a tiny job-control shell"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "education",
    "systems programming",
    "bit manipulation",
    "floating point",
    "benchmarking",
    "shell",
    "job control",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
fshow = "labkit.show:fshow_main"
ishow = "labkit.show:ishow_main"
perfdriver = "labkit.perfdriver:main"
tsh = "labkit.tsh:main"

[tool.hatch.build.targets.wheel]
packages = ["labkit"]

[tool.pytest.ini_options]
addopts = "-ra"
