[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vlhtml"
version = "0.1.0"
description = "HTML tree construction from a token stream, following the WHATWG insertion modes"
requires-python = ">=3.10"
dependencies = []
keywords = ["html", "parser", "dom", "tree-construction", "whatwg"]
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
    "Topic :: Text Processing :: Markup :: HTML",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["vlhtml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
