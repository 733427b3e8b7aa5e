[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mdbinder"
version = "0.4.51"
description = "Preprocessing and HTML post-processing building blocks for books written in Markdown"
requires-python = ">=3.10"
dependencies = []
keywords = ["book", "markdown", "documentation", "preprocessor", "renderer", "html"]
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
    "Topic :: Software Development :: Documentation",
    "Topic :: Text Processing :: Markup :: Markdown",
    "Topic :: Text Processing :: Markup :: HTML",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mdbinder"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
