[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "grind"
version = "0.8.0"
description = "Scaffold Java projects, resolve Maven dependencies, compile, bundle fat jars and manage JDKs from Python"
requires-python = ">=3.10"
keywords = ["java", "maven", "build", "dependencies", "jar", "jdk", "pom"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Programming Language :: Java",
    "Topic :: Software Development :: Build Tools",
]
dependencies = [
    "pyyaml",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["grind"]

[tool.pytest.ini_options]
addopts = "-ra"
