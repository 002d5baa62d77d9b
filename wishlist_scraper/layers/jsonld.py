"""
JSON-LD normalization for product pages.

Retailers ship schema.org data either as top-level nodes or wrapped in an
`@graph` container. Resolvers only ever look at the flattened node list
produced here.
"""
from typing import Any, Iterator, List, Optional

from wishlist_scraper.models.product import JsonLdNode, Offer

PRODUCT_TYPES = ("Product", "http://schema.org/Product")


def normalize_product_nodes(nodes: List[Any]) -> List[JsonLdNode]:
    """
    Flatten one level of `@graph` containers.

    A node whose `@graph` is a list is replaced by the members of that list;
    every other node passes through unchanged. Graphs nested inside graph
    members are left as they are. Non-object entries are dropped.
    """
    flattened: List[JsonLdNode] = []

    for node in nodes:
        if not isinstance(node, dict):
            continue
        graph = node.get("@graph")
        if isinstance(graph, list):
            flattened.extend(item for item in graph if isinstance(item, dict))
        else:
            flattened.append(node)

    return flattened


def is_product_node(node: JsonLdNode) -> bool:
    """Check whether a node is a schema.org Product."""
    return node.get("@type") in PRODUCT_TYPES


def iter_product_nodes(nodes: List[JsonLdNode]) -> Iterator[JsonLdNode]:
    """Yield Product nodes in document order."""
    for node in nodes:
        if is_product_node(node):
            yield node


def first_offer(node: JsonLdNode) -> Optional[Offer]:
    """Return the node's offer, or the first one when `offers` is a list."""
    offers = node.get("offers")
    if isinstance(offers, list):
        offers = offers[0] if offers else None
    return Offer.from_node(offers)


def image_from_node(node: JsonLdNode) -> Optional[str]:
    """
    Normalize a Product `image` value to a single URL.

    Handles:
    - String: returned as-is
    - List: first element (an ImageObject in first position yields its url)
    - ImageObject: its url
    """
    image = node.get("image")
    if isinstance(image, list):
        image = image[0] if image else None
    if isinstance(image, dict):
        image = image.get("url")
    if not image or not isinstance(image, str):
        return None
    return image
