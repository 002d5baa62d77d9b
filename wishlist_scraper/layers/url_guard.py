"""
URL Guard for the Wishlist Scraper service.
First gate of every extraction: rejects URLs that would make the server
fetch loopback, private or internal targets.
"""
import socket
from urllib.parse import urlparse

ALLOWED_SCHEMES = ("http", "https")

BLOCKED_HOSTS = ("localhost", "127.0.0.1", "::1", "0.0.0.0")

BLOCKED_HOST_PREFIXES = ("192.168.", "10.", "172.16.")

BLOCKED_HOST_SUBSTRINGS = ("internal",)


def canonical_host(hostname: str) -> str:
    """
    Rewrite numeric IPv4 shorthand to dotted-quad form.

    Hosts such as "2130706433", "0x7f000001", "127.1" or "012.0.0.5" are
    reached by the resolver as loopback or private addresses, so they are
    compared in the same form as the denylist entries.
    """
    try:
        return socket.inet_ntoa(socket.inet_aton(hostname))
    except (OSError, ValueError):
        return hostname


def is_safe_url(raw: str) -> bool:
    """
    Check whether a URL may be fetched server-side.

    This is a denylist: loopback names, a few private IPv4 prefixes and
    any hostname containing "internal" are refused, everything else with
    an http(s) scheme passes. It does not cover 172.17-31.x, IPv6 private
    ranges or hosts that resolve (or redirect) to private addresses.

    Args:
        raw: The URL as received from the client

    Returns:
        True if the URL may be fetched
    """
    try:
        parsed = urlparse(raw)
        hostname = parsed.hostname
    except (ValueError, TypeError, AttributeError):
        return False

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        return False

    if not hostname:
        return False

    hostname = canonical_host(hostname.lower())

    if hostname in BLOCKED_HOSTS:
        return False
    if hostname.startswith(BLOCKED_HOST_PREFIXES):
        return False
    if any(part in hostname for part in BLOCKED_HOST_SUBSTRINGS):
        return False

    return True
