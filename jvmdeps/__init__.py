"""Transitive dependency resolution for JVM package repositories."""

__version__ = "0.2.0"
