import re
from typing import Any, Optional
from urllib.parse import quote_plus

# ===========================
# Patterns
# ===========================
LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")


# ===========================
# Slug Normalization
# ===========================
def slugify(text: str) -> str:
    if not text:
        return ""

    slug = text.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)

    return slug.strip("-")


# ===========================
# Integer Parsing
# ===========================
def parse_int(value: Any) -> Optional[int]:
    if value is None:
        return None

    match = LEADING_INT_PATTERN.match(str(value))
    if not match:
        return None
    return int(match.group(1))


# ===========================
# Cache Key Creation
# ===========================
def create_cache_key(operation: str, *parts: Any) -> str:
    cache_key = operation
    for part in parts:
        cache_key += f":{quote_plus(str(part))}"
    return cache_key


# ===========================
# URL Formatting
# ===========================
def format_url(url: str, base_url: str) -> str:
    if not url:
        return ""

    if url.startswith("http://") or url.startswith("https://"):
        return url

    if url.startswith("//"):
        return f"https:{url}"

    if url.startswith("/"):
        return f"{base_url}{url}"

    return f"{base_url}/{url}"
