"""
PageLocation: the page URL as an explicit read/write capability.

Read side: origin, pathname, query. Write side: replace_state(), which
changes the visible URL without navigating (history.replaceState in the
browser). The web layer renders replaced_url into the page.
"""
from __future__ import annotations

from urllib.parse import parse_qsl, urlsplit


class PageLocation:
    def __init__(self, url: str) -> None:
        parts = urlsplit(url)
        self.href = url
        self.origin = f"{parts.scheme}://{parts.netloc}" if parts.netloc else ""
        self.pathname = parts.path or "/"
        self.search = parts.query
        # First value wins, as URLSearchParams.get() does
        self.query: dict[str, str] = {}
        for name, value in parse_qsl(parts.query, keep_blank_values=True):
            self.query.setdefault(name, value)
        self.replaced_url: str | None = None

    def replace_state(self, url: str) -> None:
        self.replaced_url = url

    def __repr__(self) -> str:
        return f"PageLocation({self.href!r})"
