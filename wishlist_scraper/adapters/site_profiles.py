"""
Site profiles for retailers that need special handling.

A profile bundles, for hosts it matches, the request header overrides and
the raw-HTML price/image extractors used when structured metadata is
incomplete. Profiles are evaluated in registry order; hosts no profile
matches get the browser headers and the generic extractors.
"""
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlparse

from wishlist_scraper.models.product import HeaderSet

Extractor = Callable[[str], Optional[str]]

DEFAULT_HEADERS: HeaderSet = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/129.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "cross-site",
    "Upgrade-Insecure-Requests": "1",
}

# Sites that only serve OpenGraph tags to link-preview crawlers
CRAWLER_USER_AGENT = "facebookexternalhit/1.1 (+http://www.facebook.com/externalhit_uatext.php)"


# =========================================================================
# RAW HTML EXTRACTORS
# =========================================================================

_AMAZON_OFFSCREEN = re.compile(r"""class=["']a-offscreen["']>([^<]+)<""")
_AMAZON_WHOLE = re.compile(r"""class=["']a-price-whole["']>([^<]+)<""")
_AMAZON_FRACTION = re.compile(r"""class=["']a-price-fraction["']>([^<]+)<""")
_AMAZON_IMAGE = re.compile(r'"large":"(https://m\.media-amazon\.com/images/I/[^"]+)"')

_SHEIN_PRICES = tuple(
    re.compile(rf""""{key}"\s*:\s*["']?([0-9]+\.?[0-9]*)["']?""")
    for key in ("salePrice", "retailPrice", "productPrice")
)
_SHEIN_IMAGES = tuple(
    re.compile(rf""""{key}"\s*:\s*["'](https://[^"']+)["']""")
    for key in ("original_image_url", "mainImage")
)

_GENERIC_PRICE = re.compile(r""""price"\s*:\s*["']?([0-9]+\.?[0-9]*)["']?""")
_GENERIC_IMAGE = re.compile(
    r"""<img[^>]+src=["'](https://[^"']+\.(?:jpg|png|webp))["'][^>]*>""", re.IGNORECASE
)

_NON_PRICE_CHARS = re.compile(r"[^0-9.]")


def _first_group(patterns: Tuple[re.Pattern, ...], html: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(html)
        if match:
            return match.group(1)
    return None


def extract_amazon_offscreen_price(html: str) -> Optional[str]:
    """<span class="a-offscreen">$99.99</span> -> 99.99"""
    match = _AMAZON_OFFSCREEN.search(html)
    if not match:
        return None
    return _NON_PRICE_CHARS.sub("", match.group(1)) or None


def extract_amazon_split_price(html: str) -> Optional[str]:
    """a-price-whole plus optional a-price-fraction -> 99 or 99.99"""
    whole = _AMAZON_WHOLE.search(html)
    if not whole:
        return None
    price = whole.group(1).strip()
    fraction = _AMAZON_FRACTION.search(html)
    if fraction:
        price += "." + fraction.group(1).strip()
    return _NON_PRICE_CHARS.sub("", price) or None


def extract_amazon_image(html: str) -> Optional[str]:
    match = _AMAZON_IMAGE.search(html)
    return match.group(1) if match else None


def extract_shein_price(html: str) -> Optional[str]:
    return _first_group(_SHEIN_PRICES, html)


def extract_shein_image(html: str) -> Optional[str]:
    return _first_group(_SHEIN_IMAGES, html)


def extract_generic_price(html: str) -> Optional[str]:
    match = _GENERIC_PRICE.search(html)
    return match.group(1) if match else None


def extract_generic_image(html: str) -> Optional[str]:
    match = _GENERIC_IMAGE.search(html)
    return match.group(1) if match else None


# Amazon's price markup is checked on every host, ahead of any profile
LEADING_PRICE_EXTRACTORS: Tuple[Extractor, ...] = (
    extract_amazon_offscreen_price,
    extract_amazon_split_price,
)
GENERIC_PRICE_EXTRACTORS: Tuple[Extractor, ...] = (extract_generic_price,)
GENERIC_IMAGE_EXTRACTORS: Tuple[Extractor, ...] = (extract_generic_image,)


# =========================================================================
# REGISTRY
# =========================================================================

@dataclass(frozen=True)
class SiteProfile:
    """Per-retailer overrides, selected by host."""
    name: str
    host_match: Callable[[str], bool]
    header_overrides: HeaderSet = field(default_factory=dict)
    price_extractors: Tuple[Extractor, ...] = ()
    image_extractors: Tuple[Extractor, ...] = ()

    def matches(self, host: str) -> bool:
        return self.host_match(host)


def host_contains(fragment: str) -> Callable[[str], bool]:
    """Build a host matcher that checks for a substring."""
    def match(host: str) -> bool:
        return fragment in host
    return match


SITE_PROFILES: List[SiteProfile] = [
    SiteProfile(
        name="shein",
        host_match=host_contains("shein."),
        header_overrides={"User-Agent": CRAWLER_USER_AGENT},
        price_extractors=(extract_shein_price,),
    ),
    SiteProfile(
        name="shein_images",
        host_match=host_contains("shein.com"),
        image_extractors=(extract_shein_image,),
    ),
    SiteProfile(
        name="amazon",
        host_match=host_contains("amazon."),
        image_extractors=(extract_amazon_image,),
    ),
]


def host_of(url: str) -> str:
    """Lowercased hostname of a URL, empty when it cannot be parsed."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def matching_profiles(url: str, profiles: Optional[List[SiteProfile]] = None) -> List[SiteProfile]:
    """Return the profiles matching the URL's host, in registry order."""
    host = host_of(url)
    if not host:
        return []
    return [p for p in (SITE_PROFILES if profiles is None else profiles) if p.matches(host)]


def select_headers(url: str, profiles: Optional[List[SiteProfile]] = None) -> HeaderSet:
    """
    Choose the request headers for a URL.

    Starts from the browser-like defaults and applies the overrides of every
    matching profile in order. Always returns a fresh dict.
    """
    headers = dict(DEFAULT_HEADERS)
    for profile in matching_profiles(url, profiles):
        headers.update(profile.header_overrides)
    return headers


def price_extractors_for(url: str, profiles: Optional[List[SiteProfile]] = None) -> List[Extractor]:
    """Amazon markup first, then site-specific extractors, then the generic one."""
    extractors: List[Extractor] = list(LEADING_PRICE_EXTRACTORS)
    for profile in matching_profiles(url, profiles):
        extractors.extend(profile.price_extractors)
    extractors.extend(GENERIC_PRICE_EXTRACTORS)
    return extractors


def image_extractors_for(url: str, profiles: Optional[List[SiteProfile]] = None) -> List[Extractor]:
    """Site-specific image extractors replace the generic one when present."""
    extractors: List[Extractor] = []
    for profile in matching_profiles(url, profiles):
        extractors.extend(profile.image_extractors)
    return extractors or list(GENERIC_IMAGE_EXTRACTORS)
