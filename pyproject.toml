[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bajatelemetry"
version = "0.1.0"
description = "Telemetry packets, CAN decoding, radio scheduling and ground-station logging for an off-road race car"
requires-python = ">=3.10"
dependencies = []
keywords = ["telemetry", "can-bus", "lora", "ble", "gps", "csv", "json"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Interface Engine/Protocol Translator",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
baja-receiver = "bajatelemetry.receiver:main"

[tool.hatch.build.targets.wheel]
packages = ["bajatelemetry"]

[tool.pytest.ini_options]
addopts = "-ra"
