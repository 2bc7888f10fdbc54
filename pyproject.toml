[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fpsbios"
version = "0.1.0"
description = "Tools for building console BIOS ROM images, plus models of the IOP kernel services"
requires-python = ">=3.10"
dependencies = []
keywords = ["bios", "rom", "romdir", "iop", "emulator", "firmware-image"]
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
    "Topic :: System :: Emulators",
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
fpsbios-romdir = "fpsbios.romdir:main"
fpsbios-romver = "fpsbios.romver:main"
fpsbios-romgen = "fpsbios.romgen:main"

[tool.hatch.build.targets.wheel]
packages = ["fpsbios"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
