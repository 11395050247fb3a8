"""
Server-rendered pages.

GET /          page load: callback interpretation, then catalog or confirmation
GET /view      current page-session view
POST /events   navigation event -> reducer -> redirect to /view
GET /checkout  leave for the hosted checkout
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from pydantic import ValidationError
from starlette.templating import Jinja2Templates

from egzamin8.access import EntitlementStore, PageLocation, SignedCookieStorage, start_page
from egzamin8.access.checkout import checkout_url_for
from egzamin8.catalog.loader import Catalog, get_catalog
from egzamin8.catalog.models import BundleOffer, Product
from egzamin8.content.renderer import render_topic
from egzamin8.core.config import settings
from egzamin8.navigation.state import (
    INITIAL_STATE,
    CatalogView,
    ContentView,
    NavigationContext,
    PaymentConfirmed,
    PreviewView,
    Purchase,
    ViewState,
    adjacent_sections,
    event_adapter,
    reduce,
)
from egzamin8.promo.countdown import Countdown
from egzamin8.utils.currency import format_pln
from egzamin8.utils.metrics import checkout_redirects_total
from egzamin8.web.session import attach_view_state, load_view_state

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
templates.env.filters["pln"] = format_pln


def entitlements_from_request(request: Request) -> tuple[EntitlementStore, SignedCookieStorage]:
    storage = SignedCookieStorage(request.cookies, salt="entitlements")
    return EntitlementStore(storage), storage


def confirmation_message(granted_id: str, catalog: Catalog) -> str:
    if catalog.is_bundle(granted_id):
        names = ", ".join(p.name for p in catalog)
        return f"Masz teraz pełny dostęp do wszystkich przedmiotów: {names}!"
    product = catalog.get(granted_id)
    if product is not None:
        return f"Masz teraz pełny dostęp do materiałów z przedmiotu {product.name}."
    return "Masz teraz pełny dostęp do zakupionych materiałów."


def _visible_state(state: ViewState, catalog: Catalog, store: EntitlementStore) -> ViewState:
    """Stale cookie may point at a product that is gone or no longer unlocked."""
    if isinstance(state, (PreviewView, ContentView)) and state.product_id not in catalog:
        return INITIAL_STATE
    if isinstance(state, ContentView) and not store.is_granted(state.product_id):
        return INITIAL_STATE
    return state


def _content_context(state: ContentView, product: Product) -> dict[str, Any]:
    section = product.get_section(state.section_id)
    topics = []
    if section is not None:
        for position, topic in enumerate(section.topics):
            expanded = state.topic is not None and state.topic.position == position
            topics.append({
                "position": position,
                "title": topic.title,
                "expanded": expanded,
                "blocks": render_topic(topic.content).blocks() if expanded else [],
            })
    prev_section, next_section = adjacent_sections(product, state.section_id)
    return {
        "section": section,
        "topics": topics,
        "prev_section": prev_section,
        "next_section": next_section,
    }


def render_view(
    request: Request,
    state: ViewState,
    catalog: Catalog,
    store: EntitlementStore,
    *,
    replaced_url: str | None = None,
) -> HTMLResponse:
    state = _visible_state(state, catalog, store)
    context: dict[str, Any] = {
        "state": state,
        "catalog": catalog,
        "bundle": catalog.bundle,
        "purchased": store.granted,
        "all_purchased": store.has_all(catalog.product_ids),
        "countdown": str(Countdown.parse(settings.promo_countdown_start)),
        "replaced_url": replaced_url,
        "promo_stream_url": str(request.app.url_path_for("promo_stream")),
    }
    if isinstance(state, CatalogView):
        template = "catalog.html"
    elif isinstance(state, PreviewView):
        template = "preview.html"
        context["product"] = catalog.get(state.product_id)
    elif isinstance(state, ContentView):
        template = "content.html"
        product = catalog.get(state.product_id)
        context["product"] = product
        context.update(_content_context(state, product))
    else:
        template = "confirmation.html"
        context["message"] = confirmation_message(state.granted_id, catalog)
        context["unlocked_products"] = [p for p in catalog if store.is_granted(p.id)]
    response = templates.TemplateResponse(request, template, context)
    attach_view_state(response, state)
    return response


def _checkout_redirect(request: Request, target: Product | BundleOffer) -> RedirectResponse:
    location = PageLocation(str(request.url_for("index")))
    url = checkout_url_for(target, location)
    checkout_redirects_total.labels(product_id=target.id).inc()
    logger.info("checkout_redirect", extra={"product_id": target.id})
    return RedirectResponse(url=url, status_code=303)


@router.get("/", response_class=HTMLResponse, name="index")
def index(request: Request, catalog: Catalog = Depends(get_catalog)) -> Response:
    store, storage = entitlements_from_request(request)
    location = PageLocation(str(request.url))
    state = start_page(location, store, catalog)
    response = render_view(request, state, catalog, store, replaced_url=location.replaced_url)
    storage.apply_to_response(response)
    return response


@router.get("/view", response_class=HTMLResponse)
def current_view(request: Request, catalog: Catalog = Depends(get_catalog)) -> Response:
    store, _ = entitlements_from_request(request)
    state = load_view_state(request.cookies.get(settings.view_state_cookie_name))
    return render_view(request, state, catalog, store)


@router.post("/events")
async def post_event(request: Request, catalog: Catalog = Depends(get_catalog)) -> Response:
    form = await request.form()
    try:
        event = event_adapter.validate_python(dict(form))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors(include_url=False, include_context=False)) from e
    if isinstance(event, PaymentConfirmed):
        # Only the callback on page load may confirm a payment
        raise HTTPException(status_code=400, detail="payment_confirmed is not a user event")

    if isinstance(event, Purchase):
        target = catalog.bundle if catalog.is_bundle(event.product_id) else catalog.get(event.product_id)
        if target is None:
            raise HTTPException(status_code=404, detail="Unknown product")
        return _checkout_redirect(request, target)

    store, _ = entitlements_from_request(request)
    state = load_view_state(request.cookies.get(settings.view_state_cookie_name))
    new_state = reduce(state, event, NavigationContext(catalog=catalog, entitlements=store))
    logger.info("view_transition", extra={"event": event.type, "state": new_state.kind})
    response = RedirectResponse(url="/view", status_code=303)
    attach_view_state(response, new_state)
    return response


@router.get("/checkout/{product_id}")
def checkout(product_id: str, request: Request, catalog: Catalog = Depends(get_catalog)) -> RedirectResponse:
    target = catalog.bundle if catalog.is_bundle(product_id) else catalog.get(product_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Unknown product")
    return _checkout_redirect(request, target)
