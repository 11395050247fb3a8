"""
EntitlementStore: set of unlocked product ids with write-through persistence.

Entitlements are permanent: there is no revoke. Broken or missing storage
means «nothing purchased», never an error.
"""
from __future__ import annotations

import json
import logging
from typing import Iterable

from egzamin8.access.storage import KeyValueStorage, StorageError
from egzamin8.access.config import get_storage_key
from egzamin8.utils.metrics import entitlements_granted_total

logger = logging.getLogger(__name__)

# Metric label for ids outside the catalog; keeps label cardinality bounded
UNKNOWN_LABEL = "unknown"


class EntitlementStore:
    def __init__(self, storage: KeyValueStorage, key: str | None = None) -> None:
        self.storage = storage
        self.key = key or get_storage_key()
        # list keeps grant order for the persisted value
        self._granted: list[str] = sorted(self.load())

    def load(self) -> set[str]:
        """Read the persisted set; empty on absence, corruption or storage failure."""
        try:
            raw = self.storage.get(self.key)
        except StorageError as e:
            logger.warning("entitlements_load_failed", extra={"key": self.key, "error": str(e)})
            return set()
        if not raw:
            return set()
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("entitlements_load_failed", extra={"key": self.key, "error": str(e)})
            return set()
        if not isinstance(data, list):
            logger.warning("entitlements_load_failed", extra={"key": self.key, "error": "not a list"})
            return set()
        return {item for item in data if isinstance(item, str)}

    def grant(self, product_id: str, *, known: bool = True) -> bool:
        """
        Idempotent. Returns True if the set changed (and was written through).

        known=False still grants the id; the metric counts it under "unknown".
        """
        if product_id in self._granted:
            return False
        self._granted.append(product_id)
        try:
            self.storage.set(self.key, json.dumps(self._granted, ensure_ascii=False))
        except StorageError as e:
            # In-memory grant stays valid for this page load
            logger.warning(
                "entitlements_save_failed",
                extra={"key": self.key, "product_id": product_id, "error": str(e)},
            )
        entitlements_granted_total.labels(product_id=product_id if known else UNKNOWN_LABEL).inc()
        logger.info("entitlement_granted", extra={"product_id": product_id})
        return True

    def grant_many(self, product_ids: Iterable[str]) -> list[str]:
        """Grant each id in the given order; returns ids that were newly added."""
        return [pid for pid in product_ids if self.grant(pid)]

    def is_granted(self, product_id: str) -> bool:
        return product_id in self._granted

    def has_all(self, product_ids: Iterable[str]) -> bool:
        return all(self.is_granted(pid) for pid in product_ids)

    @property
    def granted(self) -> frozenset[str]:
        return frozenset(self._granted)

    def as_list(self) -> list[str]:
        return list(self._granted)
