[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gameserverdb"
version = "0.1.0"
description = "SQLite storage for game definitions, gameservers and their scheduled tasks"
requires-python = ">=3.10"
dependencies = []
keywords = ["gameserver", "sqlite", "scheduled-tasks", "storage", "hosting"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gameserverdb"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
