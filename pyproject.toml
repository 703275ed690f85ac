[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "juliusgov"
version = "0.1.0"
description = "Proposal governance, treasury, UTXO bookkeeping, peer scoring and wallet storage for a proof-of-stake coin"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = [
    "blockchain",
    "governance",
    "treasury",
    "proof-of-stake",
    "utxo",
    "wallet",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
juliusgov = "juliusgov.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["juliusgov"]

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
