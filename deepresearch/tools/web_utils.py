from __future__ import annotations

import re
from urllib.parse import urlparse


def is_valid_url(url: str) -> bool:
    """Basic URL validation."""
    try:
        result = urlparse(url)
        return all([result.scheme in ("http", "https"), result.netloc])
    except ValueError:
        return False


def normalize_url(url: str) -> str:
    """Deduplication key for a URL: query string and fragment dropped, lowercased."""
    return url.split("?", 1)[0].split("#", 1)[0].lower()


def extract_domain(url: str) -> str:
    """Extract the lowercased host from a URL, without port."""
    try:
        return (urlparse(url.strip()).hostname or "").lower()
    except ValueError:
        return ""


def clean_text(text: str, max_length: int = 500) -> str:
    """Collapse whitespace in provider text and trim to max length."""
    text = re.sub(r"\s+", " ", text or "").strip()
    if len(text) > max_length:
        text = text[:max_length] + "..."
    return text
