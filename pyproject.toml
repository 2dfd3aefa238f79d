[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mysqlmetrics"
version = "0.1.0"
description = "Read Prometheus-style metrics from MySQL information_schema, performance_schema, mysql.user and master status."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "mysql",
    "mariadb",
    "percona",
    "prometheus",
    "metrics",
    "monitoring",
    "performance_schema",
    "information_schema",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mysqlmetrics"]

[tool.hatch.build.targets.sdist]
include = ["mysqlmetrics", "tests", "pyproject.toml"]

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
