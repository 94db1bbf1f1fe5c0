[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "bankan"
version = "0.1.0"
description = "A kanban board with tag filtering, drag-and-drop between stages, and Gregorian, lunar and Tibetan calendar items"
requires-python = ">=3.10"
dependencies = []
keywords = ["kanban", "board", "tasks", "tags", "calendar", "lunar", "tibetan"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Natural Language :: English",
    "Natural Language :: Chinese (Simplified)",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Scheduling",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
bankan = "bankan.app:main"

[tool.setuptools.packages.find]
include = ["bankan*"]

[tool.pytest.ini_options]
addopts = "-ra"
