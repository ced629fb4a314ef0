"""Library for scaffolding, dependency resolution, building and JDK management of Java projects."""

__version__ = "0.8.0"