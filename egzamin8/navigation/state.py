"""
View state machine: reduce(state, event, ctx) -> new state.

Pure logic, no I/O. States and events are frozen pydantic models with a
discriminator field, so they serialize into the view cookie and parse from
form posts as-is. An event that does not apply to the current state leaves
the state unchanged; there is no error state.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated, Literal, Protocol, Union

from pydantic import BaseModel, Field, TypeAdapter

from egzamin8.catalog.loader import Catalog
from egzamin8.catalog.models import Product, Section

logger = logging.getLogger(__name__)


class TopicKey(BaseModel):
    section_id: str
    position: int

    model_config = {"frozen": True}


# ----- States -----


class CatalogView(BaseModel):
    kind: Literal["catalog"] = "catalog"

    model_config = {"frozen": True}


class PreviewView(BaseModel):
    kind: Literal["preview"] = "preview"
    product_id: str

    model_config = {"frozen": True}


class ContentView(BaseModel):
    kind: Literal["content"] = "content"
    product_id: str
    section_id: str | None = None
    topic: TopicKey | None = None  # cleared on every section change

    model_config = {"frozen": True}


class ConfirmationView(BaseModel):
    kind: Literal["confirmation"] = "confirmation"
    granted_id: str

    model_config = {"frozen": True}


ViewState = Annotated[
    Union[CatalogView, PreviewView, ContentView, ConfirmationView],
    Field(discriminator="kind"),
]
view_state_adapter: TypeAdapter[ViewState] = TypeAdapter(ViewState)

INITIAL_STATE = CatalogView()


# ----- Events -----


class Select(BaseModel):
    type: Literal["select"] = "select"
    product_id: str

    model_config = {"frozen": True}


class Back(BaseModel):
    type: Literal["back"] = "back"

    model_config = {"frozen": True}


class Purchase(BaseModel):
    """No local transition: the web layer leaves the site for checkout."""

    type: Literal["purchase"] = "purchase"
    product_id: str

    model_config = {"frozen": True}


class SelectSection(BaseModel):
    type: Literal["select_section"] = "select_section"
    section_id: str

    model_config = {"frozen": True}


class SelectTopic(BaseModel):
    type: Literal["select_topic"] = "select_topic"
    section_id: str
    position: int

    model_config = {"frozen": True}

    @property
    def key(self) -> TopicKey:
        return TopicKey(section_id=self.section_id, position=self.position)


class GoHome(BaseModel):
    type: Literal["go_home"] = "go_home"

    model_config = {"frozen": True}


class PaymentConfirmed(BaseModel):
    """Emitted by the callback interpreter at page load only."""

    type: Literal["payment_confirmed"] = "payment_confirmed"
    granted_id: str

    model_config = {"frozen": True}


class GoToContent(BaseModel):
    type: Literal["go_to_content"] = "go_to_content"
    product_id: str

    model_config = {"frozen": True}


Event = Annotated[
    Union[Select, Back, Purchase, SelectSection, SelectTopic, GoHome, PaymentConfirmed, GoToContent],
    Field(discriminator="type"),
]
event_adapter: TypeAdapter[Event] = TypeAdapter(Event)


class EntitlementLookup(Protocol):
    def is_granted(self, product_id: str) -> bool: ...


@dataclass(frozen=True)
class NavigationContext:
    catalog: Catalog
    entitlements: EntitlementLookup


def _enter_content(product: Product) -> ContentView:
    return ContentView(product_id=product.id, section_id=product.first_section_id, topic=None)


def reduce(state: ViewState, event: Event, ctx: NavigationContext) -> ViewState:
    """
    Transition table:
    - catalog --select--> content (granted) | preview (not granted)
    - preview --back--> catalog; preview --purchase--> preview
    - content --select_section/select_topic--> content
    - confirmation --go_to_content--> content (granted only)
    - any --go_home--> catalog; any --payment_confirmed--> confirmation
    """
    if isinstance(event, GoHome):
        return INITIAL_STATE

    if isinstance(event, PaymentConfirmed):
        return ConfirmationView(granted_id=event.granted_id)

    if isinstance(state, CatalogView) and isinstance(event, Select):
        product = ctx.catalog.get(event.product_id)
        if product is None:
            return state
        if ctx.entitlements.is_granted(product.id):
            return _enter_content(product)
        return PreviewView(product_id=product.id)

    if isinstance(state, PreviewView):
        if isinstance(event, Back):
            return INITIAL_STATE
        return state

    if isinstance(state, ContentView):
        product = ctx.catalog.get(state.product_id)
        if product is None:
            return state
        if isinstance(event, SelectSection):
            if event.section_id == state.section_id:
                return state
            if product.get_section(event.section_id) is None:
                return state
            return ContentView(product_id=product.id, section_id=event.section_id, topic=None)
        if isinstance(event, SelectTopic):
            section = product.get_section(state.section_id)
            key = event.key
            if section is None or key.section_id != section.id:
                return state
            if not 0 <= key.position < len(section.topics):
                return state
            topic = None if state.topic == key else key
            return state.model_copy(update={"topic": topic})
        return state

    if isinstance(state, ConfirmationView) and isinstance(event, GoToContent):
        product = ctx.catalog.get(event.product_id)
        if product is None or not ctx.entitlements.is_granted(product.id):
            logger.info("go_to_content_rejected", extra={"product_id": event.product_id})
            return state
        return _enter_content(product)

    return state


def adjacent_sections(product: Product, section_id: str | None) -> tuple[Section | None, Section | None]:
    """(previous, next) section around section_id; (None, None) if not found."""
    ids = product.section_ids()
    if section_id not in ids:
        return None, None
    index = ids.index(section_id)
    prev_section = product.sections[index - 1] if index > 0 else None
    next_section = product.sections[index + 1] if index < len(ids) - 1 else None
    return prev_section, next_section
