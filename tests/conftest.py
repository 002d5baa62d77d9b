from typing import Callable, Dict, Optional

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from wishlist_scraper.adapters.metadata_fetcher import MetadataFetcher
from wishlist_scraper.adapters.raw_html import RawHTMLScanner
from wishlist_scraper.layers.auth import AuthenticationLayer
from wishlist_scraper.layers.extraction import ExtractionLayer
from wishlist_scraper.main import app
from wishlist_scraper.routes.scrape import get_auth_layer, get_extraction_layer

Handler = Callable[[httpx.Request], httpx.Response]

PRODUCT_PAGE = """
<html>
  <head>
    <title>Trail Runner 2 | Example Outfitters</title>
    <meta property="og:title" content="Trail Runner 2" />
    <meta property="og:description" content="Lightweight trail shoe." />
    <meta property="og:image" content="http://cdn.example.com/trail-runner.jpg" />
    <script type="application/ld+json">
      {"@context": "https://schema.org", "@type": "Product", "name": "Trail Runner 2",
       "offers": {"@type": "Offer", "price": "129.95", "priceCurrency": "eur"}}
    </script>
  </head>
  <body><h1>Trail Runner 2</h1></body>
</html>
"""


def html_response(html: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, text=html, headers={"content-type": "text/html; charset=utf-8"})


def pages_transport(pages: Dict[str, str], raw_pages: Optional[Dict[str, str]] = None) -> httpx.MockTransport:
    """
    Serve fixed HTML per URL. The first request to a URL gets `pages`,
    later ones get `raw_pages` when provided (the raw HTML re-fetch).
    """
    seen = set()

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if raw_pages is not None and url in seen and url in raw_pages:
            return html_response(raw_pages[url])
        seen.add(url)
        if url not in pages:
            return html_response("<html></html>", status_code=404)
        return html_response(pages[url])

    return httpx.MockTransport(handler)


def build_layer(
    transport: httpx.AsyncBaseTransport,
    raw_transport: Optional[httpx.AsyncBaseTransport] = None,
    raw_fallback_enabled: bool = True,
) -> ExtractionLayer:
    return ExtractionLayer(
        metadata_fetcher=MetadataFetcher(timeout=10, transport=transport),
        raw_scanner=RawHTMLScanner(timeout=10, transport=raw_transport or transport),
        raw_fallback_enabled=raw_fallback_enabled,
    )


def open_auth_layer() -> AuthenticationLayer:
    return AuthenticationLayer(supabase_url="", supabase_key="", required=True)


@pytest.fixture
def product_layer() -> ExtractionLayer:
    return build_layer(pages_transport({"https://shop.example.com/p/1": PRODUCT_PAGE}))


@pytest.fixture
async def test_client(product_layer: ExtractionLayer):
    app.dependency_overrides[get_extraction_layer] = lambda: product_layer
    app.dependency_overrides[get_auth_layer] = open_auth_layer

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
