[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "canister_kit"
version = "0.3.3"
description = "Typed records for canister management, snapshot and log calls, plus reject-code classification."
requires-python = ">=3.10"
dependencies = []
keywords = ["canister", "management", "principal", "reject-codes", "snapshots"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["canister_kit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
