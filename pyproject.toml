[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vcontrol"
version = "0.1.0"
description = "Read and write values of heating controllers over an Optolink serial or TCP connection"
requires-python = ">=3.10"
keywords = ["optolink", "heating", "vs1", "vs2", "home-automation", "serial"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Home Automation",
    "Topic :: Terminals :: Serial",
]
dependencies = [
    "pyserial",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
vcontrol = "vcontrol.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["vcontrol"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
