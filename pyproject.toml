[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "modeldb"
version = "0.1.0"
description = "Model-oriented database access: pooled connections, SQL builders, record sets and loaders."
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "odbc", "connection-pool", "sql", "t-sql", "recordset"]
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
    "Topic :: Database :: Front-Ends",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["modeldb"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
