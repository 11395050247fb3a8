"""
Checkout callback: ?success=true&subject=<id> on page load.

Runs once per page load, before the first render:
1. read query params from the location;
2. success != "true" or no subject -> nothing to grant;
3. bundle id -> grant every catalog product (catalog order), else grant the
   id as received. Unknown ids are granted too: there is no server-side
   payment verification to check against;
4. the reducer moves to ConfirmationView(granted_id);
5. if the success marker was present at all, the visible URL is rewritten
   to the bare path so that a refresh cannot replay the grant.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from egzamin8.access.checkout import SUBJECT_PARAM, SUCCESS_PARAM, SUCCESS_VALUE
from egzamin8.access.entitlements import EntitlementStore
from egzamin8.access.location import PageLocation
from egzamin8.catalog.loader import Catalog
from egzamin8.navigation.state import (
    INITIAL_STATE,
    NavigationContext,
    PaymentConfirmed,
    ViewState,
    reduce,
)
from egzamin8.utils.metrics import payment_callbacks_total

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallbackResult:
    granted_id: str  # bundle id or product id exactly as received
    unlocked: tuple[str, ...]  # product ids covered by this callback
    newly_granted: tuple[str, ...]  # subset that was not granted before
    is_bundle: bool = False


def interpret_callback(
    location: PageLocation,
    store: EntitlementStore,
    catalog: Catalog,
) -> CallbackResult | None:
    """Grant entitlements for a success callback; None for ordinary page loads."""
    params = location.query
    if SUCCESS_PARAM not in params:
        return None

    # Marker present: scrub regardless of what follows
    location.replace_state(location.pathname)

    subject = params.get(SUBJECT_PARAM) or ""
    if params[SUCCESS_PARAM] != SUCCESS_VALUE or not subject:
        payment_callbacks_total.labels(outcome="ignored").inc()
        logger.info("callback_ignored", extra={"granted_id": subject or None, "outcome": "ignored"})
        return None

    if catalog.is_bundle(subject):
        unlocked = tuple(catalog.product_ids)
        newly = tuple(store.grant_many(unlocked))
        result = CallbackResult(subject, unlocked, newly, is_bundle=True)
    else:
        if subject not in catalog:
            logger.warning("callback_unknown_product", extra={"product_id": subject})
        newly = (subject,) if store.grant(subject, known=subject in catalog) else ()
        result = CallbackResult(subject, (subject,), newly)

    payment_callbacks_total.labels(outcome="bundle" if result.is_bundle else "granted").inc()
    logger.info(
        "callback_processed",
        extra={
            "granted_id": result.granted_id,
            "unlocked": list(result.unlocked),
            "newly_granted": list(result.newly_granted),
        },
    )
    return result


def start_page(
    location: PageLocation,
    store: EntitlementStore,
    catalog: Catalog,
) -> ViewState:
    """Initial view state of a page load: confirmation after a callback, else catalog."""
    result = interpret_callback(location, store, catalog)
    if result is None:
        return INITIAL_STATE
    ctx = NavigationContext(catalog=catalog, entitlements=store)
    return reduce(INITIAL_STATE, PaymentConfirmed(granted_id=result.granted_id), ctx)
