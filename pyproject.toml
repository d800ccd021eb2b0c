[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sudscript"
version = "0.1.0"
description = "Importer for SUDS dialogue scripts: parses .sud text into dialogue node graphs with string tables"
requires-python = ">=3.10"
dependencies = []
keywords = ["dialogue", "scripting", "games", "branching-narrative", "localisation"]
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
    "Topic :: Games/Entertainment",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
sudscript = "sudscript.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["sudscript"]

[tool.pytest.ini_options]
addopts = "-ra"
