[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wayhibitor"
version = "0.1.0"
description = "Keep a Wayland session awake using the idle-inhibit protocol"
requires-python = ">=3.10"
dependencies = []
keywords = ["wayland", "idle", "inhibit", "screensaver", "caffeine"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Desktop Environment :: Screen Savers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
wayhibitor = "wayhibitor.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["wayhibitor"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
