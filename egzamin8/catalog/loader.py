"""
Catalog loader: YAML files -> immutable Catalog.

catalog.yaml lists per-subject files in display order; checkout links come
from settings (they differ per deployment), prices and content from the files.
"""
from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Iterator

import yaml
from pydantic import ValidationError

from egzamin8.catalog.models import BundleOffer, Product
from egzamin8.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_DIR = Path(__file__).parent / "data"


class CatalogError(ValueError):
    """Catalog data is missing or inconsistent; fatal at startup."""


class Catalog:
    """Ordered, read-only collection of products plus the bundle offer."""

    def __init__(self, products: list[Product], bundle: BundleOffer) -> None:
        seen: set[str] = set()
        for product in products:
            if product.id in seen:
                raise CatalogError(f"duplicate product id: {product.id}")
            if product.id == bundle.id:
                raise CatalogError(f"product id collides with bundle id: {product.id}")
            section_ids = product.section_ids()
            if len(section_ids) != len(set(section_ids)):
                raise CatalogError(f"duplicate section id in product: {product.id}")
            seen.add(product.id)
        self._products = tuple(products)
        self._by_id = {p.id: p for p in products}
        self.bundle = bundle

    def __iter__(self) -> Iterator[Product]:
        return iter(self._products)

    def __len__(self) -> int:
        return len(self._products)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._by_id

    @property
    def product_ids(self) -> list[str]:
        """Product ids in stable catalog order (bundle excluded)."""
        return [p.id for p in self._products]

    def get(self, product_id: str | None) -> Product | None:
        if product_id is None:
            return None
        return self._by_id.get(product_id)

    def is_bundle(self, product_id: str | None) -> bool:
        return product_id == self.bundle.id


def _read_yaml(path: Path) -> dict:
    if not path.is_file():
        raise CatalogError(f"catalog file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise CatalogError(f"catalog file must contain a mapping: {path}")
    return data


def load_catalog(
    directory: str | Path | None = None,
    checkout_links: dict[str, str] | None = None,
) -> Catalog:
    """
    Load catalog.yaml and the subject files it references.

    checkout_links overrides links from settings (used by tests/scripts).
    """
    base = Path(directory) if directory else DEFAULT_CATALOG_DIR
    links = checkout_links if checkout_links is not None else settings.checkout_links_map
    index = _read_yaml(base / "catalog.yaml")

    products: list[Product] = []
    for filename in index.get("products") or []:
        raw = _read_yaml(base / filename)
        raw.setdefault("checkout_link", links.get(raw.get("id", ""), ""))
        try:
            products.append(Product.model_validate(raw))
        except ValidationError as e:
            raise CatalogError(f"invalid product in {filename}: {e}") from e

    bundle = BundleOffer(
        id=settings.bundle_id,
        name=(index.get("bundle") or {}).get("name", "Pakiet wszystkich przedmiotów"),
        price=settings.bundle_price,
        original_price=settings.bundle_original_price,
        savings=settings.bundle_savings,
        checkout_link=links.get(settings.bundle_id, ""),
    )
    catalog = Catalog(products, bundle)
    logger.info("catalog_loaded", extra={"path": str(base)})
    return catalog


@functools.lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    """Process-wide catalog (FastAPI dependency)."""
    return load_catalog(settings.catalog_dir or None)
