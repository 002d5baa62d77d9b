"""
Extraction Layer for the Wishlist Scraper service.
Runs the product-metadata pipeline for one URL and assembles the record.
"""
import re
from typing import List, Optional

from wishlist_scraper.adapters.metadata_fetcher import MetadataFetcher
from wishlist_scraper.adapters.raw_html import RawHTMLScanner
from wishlist_scraper.adapters.site_profiles import SiteProfile, select_headers
from wishlist_scraper.config import config
from wishlist_scraper.errors import ForbiddenTarget, ScrapeError, UpstreamOther
from wishlist_scraper.layers.jsonld import normalize_product_nodes
from wishlist_scraper.layers.resolvers import (
    DEFAULT_CURRENCY,
    Resolution,
    resolve_currency,
    resolve_description,
    resolve_image,
    resolve_price,
    resolve_title,
)
from wishlist_scraper.layers.url_guard import is_safe_url
from wishlist_scraper.models.product import ExtractionResult
from wishlist_scraper.utils.logger import LayerLogger

PRICE_FORMAT = re.compile(r"^[0-9]+(\.[0-9]+)?$")


def assemble_result(
    url: str,
    title: str = "",
    description: str = "",
    image: str = "",
    price: str = "",
    currency: str = DEFAULT_CURRENCY,
) -> ExtractionResult:
    """
    Build the final record.

    Trims every string, upgrades an `http:` image to `https:` (protocol
    relative `//host/...` images are left alone) and drops a price that
    is not a plain decimal number. Never raises.
    """
    title = (title or "").strip()
    description = (description or "").strip()
    image = (image or "").strip()
    price = (price or "").strip()
    currency = (currency or "").strip().upper() or DEFAULT_CURRENCY

    if image.startswith("http:"):
        image = "https:" + image[len("http:"):]

    if price and not PRICE_FORMAT.match(price):
        price = ""

    return ExtractionResult(
        title=title,
        description=description,
        image=image,
        price=price,
        currency=currency,
        url=url,
    )


def _value(resolution: Optional[Resolution]) -> str:
    return resolution.value if resolution else ""


class ExtractionLayer:
    """
    Extraction Layer - turns a retailer URL into a product record.

    Pipeline:
    1. URL guard
    2. Header selection by site profile
    3. Structured metadata fetch (tags + JSON-LD)
    4. JSON-LD graph flattening
    5. Per-field priority cascades
    6. Raw HTML rescan when price or image is still missing
    7. Result assembly

    A field resolved by a higher-priority source is never overwritten.
    The layer holds no per-request state; one instance serves every request.
    """

    def __init__(
        self,
        metadata_fetcher: Optional[MetadataFetcher] = None,
        raw_scanner: Optional[RawHTMLScanner] = None,
        profiles: Optional[List[SiteProfile]] = None,
        raw_fallback_enabled: Optional[bool] = None,
    ):
        self.logger = LayerLogger("extraction_layer")
        self.profiles = profiles
        self.metadata_fetcher = metadata_fetcher or MetadataFetcher(timeout=config.REQUEST_TIMEOUT)
        self.raw_scanner = raw_scanner or RawHTMLScanner(
            timeout=config.REQUEST_TIMEOUT,
            profiles=profiles,
        )
        self.raw_fallback_enabled = (
            config.RAW_HTML_FALLBACK if raw_fallback_enabled is None else raw_fallback_enabled
        )

    async def extract(self, url: str) -> ExtractionResult:
        """
        Extract product metadata for a URL.

        Args:
            url: The retailer URL

        Returns:
            ExtractionResult (best effort, empty strings for unknown fields)

        Raises:
            ForbiddenTarget: The URL failed the URL guard
            UpstreamBlocked / UpstreamTimeout / UpstreamOther: The structured
                fetch failed
        """
        self.logger.log_action("extraction", "started", url=url)

        if not is_safe_url(url):
            self.logger.log_decision(
                decision="reject_url",
                reason="URL failed SSRF guard",
                url=url
            )
            raise ForbiddenTarget()

        headers = select_headers(url, self.profiles)
        self.logger.log_decision(
            decision="headers_selected",
            reason="site profile lookup",
            url=url,
            user_agent=headers.get("User-Agent")
        )

        try:
            metadata = await self.metadata_fetcher.fetch(url, headers)
        except ScrapeError:
            raise
        except Exception as e:
            self.logger.log_error(
                f"Structured fetch failed: {str(e)}",
                error_type=type(e).__name__,
                url=url
            )
            raise UpstreamOther() from e

        products = normalize_product_nodes(metadata.jsonld)

        title = resolve_title(metadata, products)
        description = resolve_description(metadata, products)
        image = resolve_image(metadata, products)
        price = resolve_price(metadata, products, _value(description), _value(title))
        currency = resolve_currency(metadata, products)

        for field_name, resolution in (
            ("title", title),
            ("description", description),
            ("image", image),
            ("price", price),
            ("currency", currency),
        ):
            if resolution:
                self.logger.log_field_resolved(field_name, resolution.source, url=url)

        price_value = _value(price)
        image_value = _value(image)

        if (not price_value or not image_value) and self.raw_fallback_enabled:
            self.logger.log_fallback(
                from_source="structured_metadata",
                to_source="raw_html",
                reason="price or image missing after structured resolution",
                url=url,
                price_missing=not price_value,
                image_missing=not image_value
            )
            scan = await self.raw_scanner.fetch_and_scan(url, headers)
            if not price_value and scan.price:
                price_value = scan.price
                self.logger.log_field_resolved("price", "raw_html", url=url)
            if not image_value and scan.image:
                image_value = scan.image
                self.logger.log_field_resolved("image", "raw_html", url=url)

        result = assemble_result(
            url=url,
            title=_value(title),
            description=_value(description),
            image=image_value,
            price=price_value,
            currency=currency.value,
        )

        self.logger.log_extraction_summary(
            url=url,
            fields_present=result.get_present_fields(),
            fields_missing=result.get_missing_fields(),
            currency=result.currency
        )

        return result
