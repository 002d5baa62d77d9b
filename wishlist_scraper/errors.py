"""
Error taxonomy for the Wishlist Scraper service.
Each error carries the HTTP status and the client-safe message it maps to.
"""
from typing import Optional


class ScrapeError(Exception):
    """Base class for every error the scrape endpoint can report."""

    status_code: int = 500
    message: str = "Failed to scrape metadata"

    def __init__(self, message: Optional[str] = None):
        if message:
            self.message = message
        super().__init__(self.message)


class InvalidInput(ScrapeError):
    """Missing or malformed `url` query parameter."""
    status_code = 400
    message = "URL is required"


class ForbiddenTarget(ScrapeError):
    """URL rejected by the URL guard."""
    status_code = 403
    message = "Invalid or restricted URL"


class Unauthorized(ScrapeError):
    """Missing or invalid bearer token."""
    status_code = 401
    message = "Unauthorized"


class UpstreamBlocked(ScrapeError):
    """Origin site refused the structured fetch (403/Forbidden)."""
    status_code = 500
    message = "This site blocks automated access. Please enter details manually."


class UpstreamTimeout(ScrapeError):
    """Structured fetch exceeded the timeout budget."""
    status_code = 500
    message = "Request timed out. Site took too long to respond."


class UpstreamOther(ScrapeError):
    """Any other fetch or parse failure."""
    status_code = 500
    message = "Failed to scrape metadata"
