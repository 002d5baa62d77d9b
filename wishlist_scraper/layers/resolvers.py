"""
Field resolvers for the Wishlist Scraper service.

Each field is resolved by a priority cascade over the harvested tags and
the flattened JSON-LD Product nodes: the first source yielding a usable
value wins and later sources are never consulted for that field.

Resolvers return a `Resolution` (value plus the source that produced it)
or None when no source had the field.
"""
import math
import re
from typing import Callable, Iterable, List, NamedTuple, Optional

from wishlist_scraper.layers.jsonld import first_offer, image_from_node, iter_product_nodes
from wishlist_scraper.models.product import JsonLdNode, Offer, PageMetadata

DEFAULT_CURRENCY = "USD"

TITLE_TAGS = ("og:title", "twitter:title", "title")
DESCRIPTION_TAGS = ("og:description", "twitter:description", "description")
IMAGE_TAGS = ("og:image", "twitter:image", "image")
PRICE_TAGS = ("og:price:amount", "product:price:amount", "price", "product:price", "twitter:data1")
CURRENCY_TAGS = ("og:price:currency", "product:price:currency")

PRICE_PATTERN_SYMBOL = re.compile(
    r"[$€£¥]\s*([0-9]{1,3}(?:[.,][0-9]{3})*(?:[.,][0-9]{2})?)", re.IGNORECASE
)
PRICE_PATTERN_CODE = re.compile(
    r"(?:USD|EUR|GBP)\s*([0-9]{1,3}(?:[.,][0-9]{3})*(?:[.,][0-9]{2})?)", re.IGNORECASE
)

_NON_PRICE_CHARS = re.compile(r"[^0-9.]")


class Resolution(NamedTuple):
    """A resolved field value and where it came from."""
    value: str
    source: str


def strip_price(value: str) -> str:
    """Drop everything except digits and dots ("$1,299.00" -> "1299.00")."""
    return _NON_PRICE_CHARS.sub("", value)


def parse_price(value: Optional[str]) -> Optional[str]:
    """Strip a raw price and accept it only if it reads as a finite number."""
    if not value:
        return None
    stripped = strip_price(str(value))
    if not stripped:
        return None
    try:
        number = float(stripped)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return stripped


def _first_tag(metadata: PageMetadata, keys: Iterable[str]) -> Optional[Resolution]:
    for key in keys:
        value = metadata.tag(key)
        if value:
            return Resolution(value, f"tag:{key}")
    return None


def _first_product_value(
    products: List[JsonLdNode],
    getter: Callable[[JsonLdNode], Optional[str]],
    source: str,
) -> Optional[Resolution]:
    for node in iter_product_nodes(products):
        value = getter(node)
        if value:
            return Resolution(value, source)
    return None


def _text(key: str) -> Callable[[JsonLdNode], Optional[str]]:
    def getter(node: JsonLdNode) -> Optional[str]:
        value = node.get(key)
        if value is None or isinstance(value, (dict, list)):
            return None
        return str(value)
    return getter


def resolve_title(metadata: PageMetadata, products: List[JsonLdNode]) -> Optional[Resolution]:
    """og:title -> twitter:title -> title -> Product.name"""
    return (
        _first_tag(metadata, TITLE_TAGS)
        or _first_product_value(products, _text("name"), "jsonld:name")
    )


def resolve_description(metadata: PageMetadata, products: List[JsonLdNode]) -> Optional[Resolution]:
    """og:description -> twitter:description -> description -> Product.description"""
    return (
        _first_tag(metadata, DESCRIPTION_TAGS)
        or _first_product_value(products, _text("description"), "jsonld:description")
    )


def resolve_image(metadata: PageMetadata, products: List[JsonLdNode]) -> Optional[Resolution]:
    """og:image -> twitter:image -> image -> Product.image"""
    return (
        _first_tag(metadata, IMAGE_TAGS)
        or _first_product_value(products, image_from_node, "jsonld:image")
    )


def _offer_price(offer: Optional[Offer]) -> Optional[str]:
    if offer is None:
        return None
    # AggregateOffer carries a range instead of a single price
    for candidate in (offer.price, offer.low_price, offer.high_price):
        price = parse_price(candidate)
        if price:
            return price
    return None


def _price_from_offers(products: List[JsonLdNode]) -> Optional[Resolution]:
    for node in iter_product_nodes(products):
        price = _offer_price(first_offer(node))
        if price:
            return Resolution(price, "jsonld:offers")
    return None


def _price_from_tags(metadata: PageMetadata) -> Optional[Resolution]:
    for key in PRICE_TAGS:
        price = parse_price(metadata.tag(key))
        if price:
            return Resolution(price, f"tag:{key}")
    return None


def _price_from_text(description: str, title: str) -> Optional[Resolution]:
    for pattern, source in ((PRICE_PATTERN_SYMBOL, "text:symbol"), (PRICE_PATTERN_CODE, "text:code")):
        match = pattern.search(description) or pattern.search(title)
        if match:
            return Resolution(match.group(1).replace(",", ""), source)
    return None


def resolve_price(
    metadata: PageMetadata,
    products: List[JsonLdNode],
    description: str = "",
    title: str = "",
) -> Optional[Resolution]:
    """
    Resolve the price from structured sources, in order:

    1. First Product offer: price, else lowPrice, else highPrice
    2. Flat price tags (og:price:amount, product:price:amount, price,
       product:price, twitter:data1) that read as a number
    3. A currency-symbol amount in the description, then the title;
       failing that a currency-code amount (USD/EUR/GBP), same order

    Args:
        metadata: Harvested tags
        products: Flattened JSON-LD nodes
        description: Already-resolved description
        title: Already-resolved title

    Returns:
        Resolution or None (the raw HTML scanner is the next step)
    """
    return (
        _price_from_offers(products)
        or _price_from_tags(metadata)
        or _price_from_text(description or "", title or "")
    )


def resolve_currency(metadata: PageMetadata, products: List[JsonLdNode]) -> Resolution:
    """
    Resolve the currency code, uppercased.

    Flat currency tags take precedence over the JSON-LD offer currency.
    Resolution is independent of where the price came from and falls back
    to USD when nothing declares a currency.
    """
    tagged = _first_tag(metadata, CURRENCY_TAGS)
    if tagged:
        return Resolution(tagged.value.strip().upper(), tagged.source)

    for node in iter_product_nodes(products):
        offer = first_offer(node)
        if offer and offer.price_currency:
            return Resolution(offer.price_currency.strip().upper(), "jsonld:priceCurrency")

    return Resolution(DEFAULT_CURRENCY, "default")
