"""Filesystem- and identifier-safe slugs for registration ids and tool names."""

import re

_WHITESPACE = re.compile(r"\s+")
_UNSAFE = re.compile(r"[^a-z0-9_-]+")
_REPEATED_DASH = re.compile(r"-{2,}")


def slugify(text: str | None, max_length: int | None = None) -> str:
    """
    Normalize text into a slug.

    Lower-cases and trims, turns whitespace runs into "-", drops anything
    outside [a-z0-9_-], collapses repeated "-" and trims "-" from both ends.
    If max_length is given the slug is truncated and a dangling "-" removed.

    Args:
        text: Arbitrary input (None and "" give "")
        max_length: Optional upper bound on the result length

    Returns:
        Slug string, possibly empty
    """
    if not text:
        return ""
    slug = str(text).lower().strip()
    slug = _WHITESPACE.sub("-", slug)
    slug = _UNSAFE.sub("", slug)
    slug = _REPEATED_DASH.sub("-", slug)
    slug = slug.strip("-")
    if max_length is not None and len(slug) > max_length:
        slug = slug[:max(max_length, 0)].rstrip("-")
    return slug
