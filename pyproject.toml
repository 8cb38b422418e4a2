[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "drybox"
version = "0.1.0"
description = "Controller logic for a filament drybox heater: thermostat, button menus, settings storage and an in-memory 128x64 screen"
requires-python = ">=3.10"
dependencies = []
keywords = ["drybox", "heater", "thermostat", "humidity", "3d-printing", "filament", "simulation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Home Automation",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
drybox = "drybox.controller:main"

[tool.hatch.build.targets.wheel]
packages = ["drybox"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
