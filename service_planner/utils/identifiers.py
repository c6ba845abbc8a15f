"""ID and slug generation"""

import re
import uuid

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def autogenerate_id(prefix: str) -> str:
    """Random id namespaced by a short prefix, e.g. svc-3f2a..."""
    return f"{prefix}-{uuid.uuid4().hex}"


def generate_slug(name: str) -> str:
    """URL-friendly slug: lowercase ascii words joined by hyphens"""
    slug = _NON_SLUG_CHARS.sub("-", name.strip().lower()).strip("-")
    return slug or "service"
