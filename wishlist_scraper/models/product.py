"""
Product metadata models for the Wishlist Scraper service.
These models describe what flows through one extraction: the fetched page
metadata, the request headers used to fetch it, and the final record
returned to the wishlist form.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

# A raw JSON-LD node as decoded from the page (recursive, loosely typed)
JsonLdNode = Dict[str, Any]

# OpenGraph / Twitter / plain meta tags keyed by property or name
RawTagMap = Dict[str, str]

# HTTP request headers sent to the retailer
HeaderSet = Dict[str, str]


class ExtractionRequest(BaseModel):
    """Inbound extraction request."""
    url: str


class Offer(BaseModel):
    """schema.org Offer / AggregateOffer subset used for pricing."""
    price: Optional[str] = None
    price_currency: Optional[str] = None
    low_price: Optional[str] = None
    high_price: Optional[str] = None

    @classmethod
    def from_node(cls, node: Any) -> Optional["Offer"]:
        """Build an offer from a JSON-LD offer node, ignoring non-objects."""
        if not isinstance(node, dict):
            return None
        return cls(
            price=_scalar(node.get("price")),
            price_currency=_scalar(node.get("priceCurrency")),
            low_price=_scalar(node.get("lowPrice")),
            high_price=_scalar(node.get("highPrice")),
        )


class PageMetadata(BaseModel):
    """What the structured metadata fetcher harvested from one page."""
    tags: RawTagMap = Field(default_factory=dict)
    jsonld: List[JsonLdNode] = Field(default_factory=list)

    def tag(self, key: str) -> Optional[str]:
        """Return a tag value, treating empty strings as absent."""
        value = self.tags.get(key)
        return value if value else None


class ExtractionResult(BaseModel):
    """Normalized product record returned by the scrape endpoint."""
    title: str = ""
    description: str = ""
    image: str = ""
    price: str = ""
    currency: str = "USD"
    url: str

    def get_present_fields(self) -> List[str]:
        """Get list of fields that carry a value."""
        return [
            name for name in ("title", "description", "image", "price")
            if getattr(self, name)
        ]

    def get_missing_fields(self) -> List[str]:
        """Get list of fields left at their unknown sentinel."""
        return [
            name for name in ("title", "description", "image", "price")
            if not getattr(self, name)
        ]


def _scalar(value: Any) -> Optional[str]:
    """Stringify a JSON-LD scalar; falsy values count as absent."""
    if value is None or value is False or value == "" or value == 0:
        return None
    if isinstance(value, (dict, list)):
        return None
    return str(value)
