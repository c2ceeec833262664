[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mbop"
version = "0.1.0"
description = "Merry Band of Pirates: a captain agent delegates a task to a crew of LLM agents"
requires-python = ">=3.10"
keywords = ["llm", "agents", "multi-agent", "chat-completion", "automation"]
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
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]
dependencies = [
    "requests",
    "click",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
mbop = "mbop.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["mbop"]

[tool.pytest.ini_options]
addopts = "-ra"
