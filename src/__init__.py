# src/__init__.py — v1
"""podgraph: canonical entity knowledge graph with a boolean keyword query language."""

from podgraph.version import __version__

__all__ = ["__version__"]
