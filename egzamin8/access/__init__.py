"""
Entitlements and the purchase round trip (internal library).
Outbound: checkout_url_for(). Inbound: interpret_callback()/start_page() on page load.
Persistence: EntitlementStore over a KeyValueStorage backend.
"""
from egzamin8.access.callback import CallbackResult, interpret_callback, start_page
from egzamin8.access.checkout import build_checkout_url, checkout_url_for
from egzamin8.access.entitlements import EntitlementStore
from egzamin8.access.location import PageLocation
from egzamin8.access.storage import (
    JsonFileStorage,
    KeyValueStorage,
    MemoryStorage,
    SignedCookieStorage,
    StorageError,
)

__all__ = [
    "CallbackResult",
    "EntitlementStore",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "PageLocation",
    "SignedCookieStorage",
    "StorageError",
    "build_checkout_url",
    "checkout_url_for",
    "interpret_callback",
    "start_page",
]
