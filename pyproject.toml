[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pilipili"
version = "0.1.0"
description = "Infrastructure for an Emby bot: TOML configuration, logging setup, a pluggable async HTTP provider and SQLite repository helpers."
requires-python = ">=3.11"
keywords = ["emby", "bot", "http", "httpx", "sqlite", "repository", "logging"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Topic :: Database",
    "Topic :: Internet :: WWW/HTTP",
    "Topic :: System :: Logging",
]
dependencies = [
    "httpx>=0.25",
    "aiosqlite>=0.19",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "pytest-asyncio>=0.23",
    "respx>=0.20",
]

[project.scripts]
pilipili = "pilipili.app:main"

[tool.hatch.build.targets.wheel]
packages = ["pilipili"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true
