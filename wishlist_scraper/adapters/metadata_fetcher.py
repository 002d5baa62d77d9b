"""
Structured metadata fetcher for the Wishlist Scraper service.
Fetches a product page and harvests its meta tags and JSON-LD nodes.
"""
import json
from typing import Any, List, Optional

import httpx
from bs4 import BeautifulSoup

from wishlist_scraper.errors import UpstreamBlocked, UpstreamOther, UpstreamTimeout
from wishlist_scraper.models.product import HeaderSet, JsonLdNode, PageMetadata, RawTagMap
from wishlist_scraper.utils.logger import LayerLogger


class MetadataFetcher:
    """
    Fetches a page and returns its OpenGraph / Twitter / plain meta tags
    plus every parsed JSON-LD node.

    Network failures are classified into the service's error taxonomy;
    nothing httpx-specific leaks past this adapter.
    """

    def __init__(self, timeout: int = 10, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.transport = transport
        self.logger = LayerLogger("metadata_fetcher")

    async def fetch(self, url: str, headers: HeaderSet) -> PageMetadata:
        """
        Fetch a page and harvest its structured metadata.

        Args:
            url: The page URL (already validated by the URL guard)
            headers: Request headers chosen for the URL's host

        Returns:
            PageMetadata with tags and JSON-LD nodes

        Raises:
            UpstreamTimeout: The fetch exceeded the timeout
            UpstreamBlocked: The site answered 403
            UpstreamOther: Any other network or parse failure
        """
        self.logger.log_action("fetch_metadata", "started", url=url)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.get(url, headers=headers)
                response.raise_for_status()
                html = response.text
        except httpx.TimeoutException as e:
            self.logger.log_error(
                f"Timed out fetching URL: {str(e)}",
                error_type="timeout",
                url=url
            )
            raise UpstreamTimeout() from e
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            self.logger.log_error(
                f"Upstream returned {status_code}",
                error_type="http_status",
                url=url,
                status_code=status_code
            )
            if status_code == 403:
                raise UpstreamBlocked() from e
            raise UpstreamOther() from e
        except httpx.HTTPError as e:
            self.logger.log_error(
                f"Failed to fetch URL: {str(e)}",
                error_type="http_error",
                url=url
            )
            raise UpstreamOther() from e

        self.logger.log_action(
            "fetch_metadata",
            "completed",
            url=url,
            status_code=response.status_code,
            content_length=len(html)
        )

        try:
            return self.parse(html)
        except Exception as e:
            self.logger.log_error(
                f"Failed to parse HTML: {str(e)}",
                error_type="parse_error",
                url=url
            )
            raise UpstreamOther() from e

    def parse(self, html: str) -> PageMetadata:
        """Parse HTML into tags and JSON-LD nodes."""
        soup = BeautifulSoup(html, "lxml")

        metadata = PageMetadata(
            tags=self._extract_tags(soup),
            jsonld=self._extract_jsonld(soup),
        )

        self.logger.log_action(
            "parse_metadata",
            "completed",
            tags_count=len(metadata.tags),
            jsonld_count=len(metadata.jsonld)
        )

        return metadata

    def _extract_tags(self, soup: BeautifulSoup) -> RawTagMap:
        """
        Collect meta tags keyed by property, name or itemprop.
        The first non-empty value for a key wins.
        """
        tags: RawTagMap = {}

        for meta in soup.find_all("meta"):
            key = meta.get("property") or meta.get("name") or meta.get("itemprop")
            content = meta.get("content")
            if not key or not content:
                continue
            content = content.strip()
            if content and key not in tags:
                tags[key] = content

        # Plain <title> stands in when no meta declares one
        if "title" not in tags:
            title_tag = soup.find("title")
            if title_tag:
                title = title_tag.get_text().strip()
                if title:
                    tags["title"] = title

        return tags

    def _extract_jsonld(self, soup: BeautifulSoup) -> List[JsonLdNode]:
        """Parse every ld+json script; unparseable scripts are skipped."""
        nodes: List[JsonLdNode] = []

        for script in soup.find_all("script", type="application/ld+json"):
            raw = script.string or script.get_text()
            if not raw or not raw.strip():
                continue

            try:
                data: Any = json.loads(raw)
            except json.JSONDecodeError:
                self.logger.log_action("parse_jsonld", "skipped", reason="invalid_json")
                continue

            if isinstance(data, list):
                nodes.extend(item for item in data if isinstance(item, dict))
            elif isinstance(data, dict):
                nodes.append(data)

        return nodes
