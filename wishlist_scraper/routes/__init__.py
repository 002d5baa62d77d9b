"""Routes package initialization."""
from wishlist_scraper.routes.scrape import router

__all__ = ["router"]
