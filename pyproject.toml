[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "memori"
version = "0.1.0"
description = "Interactive memory scanner for Linux processes"
requires-python = ">=3.10"
dependencies = []
keywords = ["memory", "scanner", "procfs", "debugging", "repl"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Debuggers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
memori = "memori.repl:main"

[tool.hatch.build.targets.wheel]
packages = ["memori"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
