"""Wishlist Scraper - product metadata extraction for wishlist entries."""

__version__ = "1.0.0"
