"""Exploded-view animation engine for rigid assemblies."""

__version__ = "0.1.0"
