"""URL -> usage category rules, mirroring the in-page tracker script."""

from urllib.parse import urlsplit

from lessismore.models import UsageCategory


def classify(url: str) -> UsageCategory:
    """Map a page URL (or bare path) to the category the user is viewing."""
    parts = urlsplit(url or "")
    path = parts.path or "/"

    if "/direct/" in path:
        return UsageCategory.MESSAGES
    if path == "/" or "/p/" in path:
        return UsageCategory.FEED
    if "/reels/" in path:
        return UsageCategory.REELS
    if "/stories/" in path:
        return UsageCategory.STORIES
    if "/explore/" in path:
        return UsageCategory.EXPLORE
    return UsageCategory.OTHER


def parse_category(value: str | None) -> UsageCategory:
    """Decode a stored category name, defaulting to Other."""
    if not value:
        return UsageCategory.OTHER
    try:
        return UsageCategory(value)
    except ValueError:
        return UsageCategory.OTHER
