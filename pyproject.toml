[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "yomine"
version = "0.3.8"
description = "Japanese vocabulary mining helpers: frequency dictionaries, kana normalisation, subtitle filename parsing and Anki filtering"
requires-python = ">=3.10"
keywords = ["japanese", "vocabulary", "anki", "ankiconnect", "subtitles", "frequency", "yomitan"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Natural Language :: Japanese",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education :: Computer Aided Instruction (CAI)",
    "Topic :: Text Processing :: Linguistic",
]
dependencies = [
    "httpx",
    "zstandard",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
    "respx",
]

[tool.hatch.build.targets.wheel]
packages = ["yomine"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
