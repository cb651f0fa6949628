[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "webservpy"
version = "0.1.0"
description = "A small nginx-style HTTP server driven by a .conf configuration file"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "server", "webserver", "nginx", "configuration", "static-files"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
webservpy = "webservpy.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["webservpy"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
