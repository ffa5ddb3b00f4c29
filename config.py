from __future__ import annotations

import os
import logging
import pathlib

from dotenv import load_dotenv

def env(name: str, default: str | None = None, *, strip: bool = True) -> str | None:
    v = os.getenv(name, default)
    if v is None:
        return None
    return v.strip() if strip else v
def env_int(name: str, default: int | None = None) -> int | None:
    v = env(name)
    if v is None or v == "":
        return default
    try:
        return int(v)
    except ValueError:
        return default
def env_float(name: str, default: float | None = None) -> float | None:
    v = env(name)
    if v is None or v == "":
        return default
    try:
        return float(v)
    except ValueError:
        return default
def env_list_ints(name: str) -> list[int]:
    raw = env(name, "")
    if not raw:
        return []
    parts = [p.strip() for p in raw.split(",") if p.strip()]
    out: list[int] = []
    for p in parts:
        try:
            out.append(int(p))
        except ValueError:
            pass
    return out
def env_map_ints(name: str) -> dict[int, int]:
    """
    Parses "12345:7,67890:8" into {12345: 7, 67890: 8}.
    Malformed pairs are skipped.
    """
    raw = env(name, "")
    if not raw:
        return {}
    out: dict[int, int] = {}
    for pair in raw.split(","):
        key, sep, value = pair.partition(":")
        if not sep:
            continue
        try:
            out[int(key.strip())] = int(value.strip())
        except ValueError:
            pass
    return out

load_dotenv()

BASE_DIR = pathlib.Path(__file__).resolve().parent
LOGS_DIR = BASE_DIR / "logs"

MARKETPLACE_API_URL       = env("MARKETPLACE_API_URL", "https://api.mhebazar.com/api") or "https://api.mhebazar.com/api"
MARKETPLACE_ACCESS_TOKEN  = env("MARKETPLACE_ACCESS_TOKEN", "")
MARKETPLACE_REFRESH_TOKEN = env("MARKETPLACE_REFRESH_TOKEN", "")
HTTP_TIMEOUT              = env_float("HTTP_TIMEOUT", 30.0) or 30.0

PREVIEW_BASE_URL = env("PREVIEW_BASE_URL", "https://www.mhebazar.in") or "https://www.mhebazar.in"

VENDOR_BOT_TOKEN = env("VENDOR_BOT_TOKEN", "")
VENDOR_TG_IDS    = env_list_ints("VENDOR_TG_IDS")
VENDOR_USER_IDS  = env_map_ints("VENDOR_USER_IDS")

MIN_IMAGE_BYTES = 50 * 1024
MAX_IMAGE_BYTES = 1024 * 1024


_log = logging.getLogger("config")
if not MARKETPLACE_ACCESS_TOKEN: _log.warning("MARKETPLACE_ACCESS_TOKEN is empty; backend calls will be anonymous.")
if not VENDOR_BOT_TOKEN: _log.warning("VENDOR_BOT_TOKEN is empty.")
if not VENDOR_TG_IDS: _log.warning("VENDOR_TG_IDS is empty or invalid; nobody can use the vendor bot.")
