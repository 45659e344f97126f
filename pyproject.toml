[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "webserv"
version = "0.1.0"
description = "Building blocks for a small HTTP/1.1 server: request and multipart parsing, routing, static resources, CGI, polling and logging."
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "server", "cgi", "multipart", "routing", "logging"]
classifiers = [
    "Development Status :: 3 - Alpha",
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

[tool.hatch.build.targets.wheel]
packages = ["webserv"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
