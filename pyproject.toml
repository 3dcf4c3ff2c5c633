[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nescpu"
version = "0.1.0"
description = "A 6502-family CPU core with the NES CPU memory bus and an iNES PRG-ROM cartridge loader"
requires-python = ">=3.10"
dependencies = []
keywords = ["nes", "6502", "emulator", "cpu", "ines", "cartridge"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
nescpu = "nescpu.cpu:main"

[tool.hatch.build.targets.wheel]
packages = ["nescpu"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
