[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gossipkit"
version = "0.1.0"
description = "Building blocks for peer-to-peer overlays: configuration strings, UDP node identifiers, peer sets, chunk scheduling, peer sampling and topology management."
requires-python = ">=3.10"
dependencies = []
keywords = ["p2p", "peer-to-peer", "gossip", "overlay", "scheduler", "peer sampling", "udp"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gossipkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
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
