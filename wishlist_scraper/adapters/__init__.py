"""Adapters package initialization."""
from wishlist_scraper.adapters.metadata_fetcher import MetadataFetcher
from wishlist_scraper.adapters.raw_html import RawHTMLScanner, ScanResult, scan_raw_html
from wishlist_scraper.adapters.site_profiles import SiteProfile, SITE_PROFILES, select_headers

__all__ = [
    "MetadataFetcher",
    "RawHTMLScanner",
    "ScanResult",
    "scan_raw_html",
    "SiteProfile",
    "SITE_PROFILES",
    "select_headers",
]
