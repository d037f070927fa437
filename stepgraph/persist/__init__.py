"""Export utilities for stepgraph models."""

from .export import GraphExporter

__all__ = ["GraphExporter"]
