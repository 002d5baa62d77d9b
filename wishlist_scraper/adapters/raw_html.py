"""
Raw HTML fallback scanner for the Wishlist Scraper service.
Used when structured metadata left the price or the image empty.
"""
from typing import List, NamedTuple, Optional

import httpx

from wishlist_scraper.adapters.site_profiles import (
    Extractor,
    SiteProfile,
    image_extractors_for,
    price_extractors_for,
)
from wishlist_scraper.models.product import HeaderSet
from wishlist_scraper.utils.logger import LayerLogger


class ScanResult(NamedTuple):
    """Price and image found in raw HTML; empty strings when not found."""
    price: str = ""
    image: str = ""


def _run_extractors(extractors: List[Extractor], html: str) -> str:
    for extractor in extractors:
        value = extractor(html)
        if value:
            return value
    return ""


def scan_raw_html(html: str, url: str, profiles: Optional[List[SiteProfile]] = None) -> ScanResult:
    """
    Scan raw page HTML for a price and an image.

    Price: Amazon markup (offscreen, then whole/fraction), then extractors
    of site profiles matching the host, then a generic `"price": n` match.
    Image: site-specific extractors when a profile supplies some, otherwise
    the first https <img> pointing at a jpg/png/webp.
    """
    return ScanResult(
        price=_run_extractors(price_extractors_for(url, profiles), html),
        image=_run_extractors(image_extractors_for(url, profiles), html),
    )


class RawHTMLScanner:
    """
    Re-fetches a page and scans its raw markup.

    The structured fetcher does not expose the HTML it parsed, hence the
    second request. This scanner never raises: any failure leaves both
    fields empty.
    """

    def __init__(
        self,
        timeout: int = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        profiles: Optional[List[SiteProfile]] = None,
    ):
        self.timeout = timeout
        self.transport = transport
        self.profiles = profiles
        self.logger = LayerLogger("raw_html_scanner")

    async def fetch_and_scan(self, url: str, headers: HeaderSet) -> ScanResult:
        """
        Fetch the page again and scan it.

        Args:
            url: The page URL
            headers: The same headers used for the structured fetch

        Returns:
            ScanResult (empty on any failure)
        """
        self.logger.log_action("raw_html_scan", "started", url=url)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                # Status is not checked: error pages can still carry the markup
                response = await client.get(url, headers=headers)
                html = response.text
        except Exception as e:
            self.logger.log_fallback(
                from_source="raw_html",
                to_source="empty_fields",
                reason=f"Raw fetch failed: {str(e)}",
                url=url,
                error_type=type(e).__name__
            )
            return ScanResult()

        result = scan_raw_html(html, url, self.profiles)

        self.logger.log_action(
            "raw_html_scan",
            "completed",
            url=url,
            status_code=response.status_code,
            price_found=bool(result.price),
            image_found=bool(result.image)
        )

        return result
