[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "spacesim"
version = "0.1.0"
description = "HTTP service for managing space simulation commodities and solar systems"
requires-python = ">=3.10"
keywords = ["simulation", "rest", "api", "flask", "sqlite", "commodities", "solar-system"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask>=2.2",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
spacesim = "spacesim.server:main"

[tool.hatch.build.targets.wheel]
packages = ["spacesim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
