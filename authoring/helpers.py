from __future__ import annotations

import json
import re
from typing import Any
from urllib.parse import urlparse

VIDEO_HOSTS = ("youtube.com", "youtu.be", "vimeo.com", "dailymotion.com")
VIDEO_EXTENSIONS = (".mp4", ".webm", ".ogg", ".mov", ".m4v")

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


def is_url(value: str) -> bool:
    """True for strings like 'https://host/path' (scheme and host both present, no whitespace)."""
    if not value or not _SCHEME_RE.match(value) or any(ch.isspace() for ch in value):
        return False
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


def is_video_locator(locator: str) -> bool:
    """
    Decides whether a persisted media locator points at a video.
    Only the locator string is looked at: known video hosts or a video file extension.
    """
    if not locator:
        return False
    parsed = urlparse(locator.strip())
    host = (parsed.netloc or "").lower().split(":")[0]
    if host.startswith("www."): host = host[4:]
    if host.startswith("m."): host = host[2:]
    if any(host == h or host.endswith("." + h) for h in VIDEO_HOSTS):
        return True
    path = (parsed.path or locator).lower()
    return path.endswith(VIDEO_EXTENSIONS)


def flatten_error_detail(detail: Any) -> str:
    """
    Turns a backend error body into one readable line.

    {"name": ["This field is required."], "price": ["A valid number is required."]}
      -> "This field is required. A valid number is required."
    """
    if detail is None:
        return ""
    if isinstance(detail, str):
        return detail.strip()
    if isinstance(detail, dict):
        for key in ("detail", "error", "message"):
            if key in detail and len(detail) == 1:
                return flatten_error_detail(detail[key])
        parts = [flatten_error_detail(v) for v in detail.values()]
        return " ".join(p for p in parts if p)
    if isinstance(detail, (list, tuple)):
        parts = [flatten_error_detail(v) for v in detail]
        return " ".join(p for p in parts if p)
    return str(detail)


def parse_json_field(raw: Any, default: Any) -> Any:
    """Backend sometimes returns nested structures as JSON strings."""
    if raw is None or raw == "":
        return default
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except ValueError:
            return default
    return raw
