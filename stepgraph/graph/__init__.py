"""Graph subpackage containing the model and adjacency indexing."""

from .indexer import index_model
from .model import Model

__all__ = [
    "Model",
    "index_model",
]
