"""Layers package initialization."""
from wishlist_scraper.layers.url_guard import is_safe_url
from wishlist_scraper.layers.jsonld import normalize_product_nodes
from wishlist_scraper.layers.auth import AuthenticationLayer, AuthStatus, AuthResult
from wishlist_scraper.layers.extraction import ExtractionLayer, assemble_result

__all__ = [
    "is_safe_url",
    "normalize_product_nodes",
    "AuthenticationLayer",
    "AuthStatus",
    "AuthResult",
    "ExtractionLayer",
    "assemble_result",
]
