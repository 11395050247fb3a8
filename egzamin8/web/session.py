"""
Page-session view state in a signed cookie (itsdangerous).
A fresh page load (GET /) starts over; /events and /view carry the state.
"""
import logging
from typing import Any

from itsdangerous import BadSignature, URLSafeSerializer
from pydantic import ValidationError

from egzamin8.core.config import settings
from egzamin8.navigation.state import INITIAL_STATE, ViewState, view_state_adapter

logger = logging.getLogger(__name__)

_serializer = URLSafeSerializer(settings.session_secret, salt="view-state")


def dump_view_state(state: ViewState) -> str:
    return _serializer.dumps(view_state_adapter.dump_python(state, mode="json"))


def load_view_state(raw: str | None) -> ViewState:
    """Invalid or tampered cookie -> initial state."""
    if not raw:
        return INITIAL_STATE
    try:
        data = _serializer.loads(raw)
        return view_state_adapter.validate_python(data)
    except (BadSignature, ValidationError) as e:
        logger.warning("view_state_invalid", extra={"error": type(e).__name__})
        return INITIAL_STATE


def attach_view_state(response: Any, state: ViewState) -> None:
    # Session cookie: not persisted across browser restarts
    response.set_cookie(
        settings.view_state_cookie_name,
        dump_view_state(state),
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )
