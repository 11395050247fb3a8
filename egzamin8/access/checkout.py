"""
Checkout redirect URL: hosted payment link + success_url pointing back here.

Only computes the URL; the caller performs the redirect. Nothing is granted
until the provider sends the visitor back with ?success=true&subject=<id>.
"""
from __future__ import annotations

import logging
from urllib.parse import quote, urlencode

from egzamin8.access.location import PageLocation
from egzamin8.catalog.models import BundleOffer, Product

logger = logging.getLogger(__name__)

SUCCESS_PARAM = "success"
SUBJECT_PARAM = "subject"
SUCCESS_VALUE = "true"
CALLBACK_PARAM = "success_url"

# encodeURIComponent-compatible
_URI_COMPONENT_SAFE = "-_.!~*'()"


def build_success_url(product_id: str, location: PageLocation) -> str:
    query = urlencode({SUCCESS_PARAM: SUCCESS_VALUE, SUBJECT_PARAM: product_id})
    return f"{location.origin}{location.pathname}?{query}"


def build_checkout_url(product_id: str, link_template: str, location: PageLocation) -> str:
    success_url = build_success_url(product_id, location)
    separator = "&" if "?" in link_template else "?"
    return f"{link_template}{separator}{CALLBACK_PARAM}={quote(success_url, safe=_URI_COMPONENT_SAFE)}"


def checkout_url_for(target: Product | BundleOffer, location: PageLocation) -> str:
    """Product -> its own id; BundleOffer -> the bundle sentinel id."""
    url = build_checkout_url(target.id, target.checkout_link, location)
    logger.info("checkout_url_built", extra={"product_id": target.id, "checkout_url": url})
    return url
