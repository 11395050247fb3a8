"""
Key-value storage for client-side state.

SignedCookieStorage is the production backend: values live in the visitor's
browser, signed with itsdangerous so they cannot be edited by hand.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Mapping

from itsdangerous import BadSignature, URLSafeSerializer

from egzamin8.access.config import get_cookie_max_age, get_signing_secret
from egzamin8.core.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Storage backend is unavailable or its content is unreadable."""


class KeyValueStorage(ABC):
    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return stored value or None if absent. May raise StorageError."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStorage(KeyValueStorage):
    """All keys in one JSON object file; every set() rewrites the file atomically."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"{self.path} does not contain a JSON object")
        return data

    def get(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except StorageError:
            # Corrupt file is overwritten rather than blocking writes
            data = {}
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".tmp-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp, self.path)
        except OSError as e:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise StorageError(f"cannot write {self.path}: {e}") from e


class SignedCookieStorage(KeyValueStorage):
    """
    Cookies of the current request as storage.

    get() reads request cookies (and values set during this request);
    set() queues a signed value which apply_to_response() writes out.
    Bad signature -> StorageError.
    """

    def __init__(
        self,
        cookies: Mapping[str, str],
        *,
        secret_key: str | None = None,
        salt: str = "client-storage",
        max_age: int | None = None,
    ) -> None:
        self._cookies = dict(cookies)
        self._pending: dict[str, str] = {}
        self.serializer = URLSafeSerializer(secret_key or get_signing_secret(), salt=salt)
        self.max_age = max_age if max_age is not None else get_cookie_max_age()

    def get(self, key: str) -> str | None:
        if key in self._pending:
            return self._pending[key]
        raw = self._cookies.get(key)
        if not raw:
            return None
        try:
            value = self.serializer.loads(raw)
        except BadSignature as e:
            raise StorageError(f"bad signature for cookie {key}") from e
        if not isinstance(value, str):
            raise StorageError(f"unexpected payload in cookie {key}")
        return value

    def set(self, key: str, value: str) -> None:
        self._pending[key] = value

    @property
    def pending(self) -> dict[str, str]:
        return dict(self._pending)

    def apply_to_response(self, response: Any) -> None:
        """Write queued values as Set-Cookie headers on a Starlette response."""
        for key, value in self._pending.items():
            response.set_cookie(
                key,
                self.serializer.dumps(value),
                max_age=self.max_age,
                httponly=True,
                secure=settings.cookie_secure,
                samesite=settings.cookie_samesite,
            )
