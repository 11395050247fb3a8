"""
Access config: typed wrappers over egzamin8.core.config for client storage.
"""
from __future__ import annotations

from egzamin8.core.config import settings


def get_storage_key() -> str:
    return getattr(settings, "entitlements_storage_key", "egzamin8_purchases")


def get_cookie_max_age() -> int:
    return getattr(settings, "entitlements_cookie_max_age", 10 * 365 * 24 * 3600)


def get_signing_secret() -> str:
    return settings.session_secret
