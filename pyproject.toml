[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "proctools"
version = "0.1.0"
description = "Process and kernel inspection utilities: slabtop, snice, sysctl, watch, top and w"
requires-python = ">=3.10"
dependencies = ["psutil"]
keywords = ["process", "monitoring", "sysctl", "slabtop", "top", "watch", "nice"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
slabtop = "proctools.slabtop:main"
snice = "proctools.snice:main"
sysctl = "proctools.sysctl:main"
watch = "proctools.watch:main"
top = "proctools.top:main"
w = "proctools.w:main"

[tool.hatch.build.targets.wheel]
packages = ["proctools"]

[tool.pytest.ini_options]
addopts = "-ra"
