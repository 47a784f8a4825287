[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "octoquery"
version = "0.1.0"
description = "SQL value types, MySQL type mapping and physical query plan structures with tree rewriting"
requires-python = ">=3.10"
dependencies = []
keywords = ["sql", "query-plan", "mysql-types", "query-optimizer", "plan-rewriting"]
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
    "Topic :: Database",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["octoquery"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
