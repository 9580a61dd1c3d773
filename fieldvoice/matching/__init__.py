"""Command index, semantic matcher and catalog search."""

from .similarity import cosine_similarity, magnitude
from .embedding import AbstractEmbeddingBackend, HttpEmbeddingBackend
from .index import CommandIndex
from .matcher import SemanticMatcher, TRIGGER_CONTEXTS, best_match
from .catalog_search import CatalogSearch, shop_search, product_search

__all__ = [
    "cosine_similarity",
    "magnitude",
    "AbstractEmbeddingBackend",
    "HttpEmbeddingBackend",
    "CommandIndex",
    "SemanticMatcher",
    "TRIGGER_CONTEXTS",
    "best_match",
    "CatalogSearch",
    "shop_search",
    "product_search",
]
