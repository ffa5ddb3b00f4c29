from __future__ import annotations

import re

from config import PREVIEW_BASE_URL

_WHITESPACE_RE = re.compile(r"\s+")
_NOT_SLUG_RE = re.compile(r"[^a-z0-9-]+")
_HYPHENS_RE = re.compile(r"-{2,}")


def slugify(text: str | None) -> str:
    """'  Electric  Forklift 2.5T ' -> 'electric-forklift-25t'"""
    slug = (text or "").lower().strip()
    slug = _WHITESPACE_RE.sub("-", slug)
    slug = _NOT_SLUG_RE.sub("", slug)
    slug = _HYPHENS_RE.sub("-", slug)
    return slug.strip("-")


def display_title(manufacturer: str | None, name: str | None, model: str | None) -> str:
    return _WHITESPACE_RE.sub(" ", f"{manufacturer or ''} {name or ''} {model or ''}").strip()


def canonical_url_path(name: str | None) -> str:
    slug = slugify(name)
    return f"/product/{slug}" if slug else ""


def live_preview_url(name: str | None, base_url: str = PREVIEW_BASE_URL) -> str:
    """Advisory only; the backend assigns the real URL."""
    path = canonical_url_path(name)
    return f"{base_url.rstrip('/')}{path}" if path else ""
