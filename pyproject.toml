[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mxdx_launcher"
version = "1.0.0"
description = "Fleet management launcher agent: command validation and execution, tmux terminal sessions, output compression and host telemetry"
requires-python = ">=3.11"
keywords = ["fleet-management", "launcher", "tmux", "terminal", "telemetry"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "psutil",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
mxdx-launcher = "mxdx_launcher.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["mxdx_launcher"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
