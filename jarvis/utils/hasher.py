"""
Cache key generation utilities.

Sandi Metz Principles:
- Single Responsibility: Fingerprint generation
- Small functions: Each does one thing
- Pure functions: No side effects
"""

import hashlib
import json
from typing import Any


def normalize_query(query: str) -> str:
    """
    Normalize query for comparison.

    Args:
        query: Query text

    Returns:
        Normalized query (lowercase, trimmed)
    """
    return query.strip().lower()


def fingerprint(*parts: Any) -> str:
    """
    Stable sha256 over JSON-serializable parts.

    Args:
        *parts: Values that identify a request

    Returns:
        Hex digest
    """
    encoded = json.dumps(parts, sort_keys=True, ensure_ascii=False, default=str)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


def generate_completion_key(
    system_prompt: str,
    user_prompt: str,
    model: str,
    temperature: float,
    prefix_chars: int = 500,
) -> str:
    """
    Generate cache key for a completion request.

    Only the first ``prefix_chars`` of the system prompt take part.

    Returns:
        Cache key (completion:sha256hash)
    """
    digest = fingerprint(system_prompt[:prefix_chars], user_prompt, model, temperature)
    return f"completion:{digest}"


def generate_search_key(query: str, limit: int) -> str:
    """
    Generate cache key for a search result set.

    Args:
        query: Search query
        limit: Result limit

    Returns:
        Cache key (search:sha256hash)
    """
    return f"search:{fingerprint(normalize_query(query), limit)}"


def generate_tag_key(tag: str) -> str:
    """
    Generate key for a tag index entry.

    Args:
        tag: Tag name

    Returns:
        Tag index key
    """
    return f"tag:{tag}"
