from fastapi import APIRouter, Depends, HTTPException, Request

from egzamin8.catalog.loader import Catalog, get_catalog
from egzamin8.content.renderer import render_topic
from egzamin8.schemas.catalog import (
    BundleOut,
    CatalogOut,
    EntitlementsOut,
    ProductOut,
    SectionOut,
    TopicOut,
)
from egzamin8.web.pages import entitlements_from_request


router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/catalog", response_model=CatalogOut)
def list_catalog(request: Request, catalog: Catalog = Depends(get_catalog)) -> CatalogOut:
    store, _ = entitlements_from_request(request)
    return CatalogOut(
        products=[
            ProductOut(
                id=product.id,
                name=product.name,
                icon=product.icon,
                price=product.price,
                topic_count=product.topic_count,
                purchased=store.is_granted(product.id),
                sections=[
                    SectionOut(id=s.id, title=s.title, topics=[t.title for t in s.topics])
                    for s in product.sections
                ],
            )
            for product in catalog
        ],
        bundle=BundleOut(
            id=catalog.bundle.id,
            name=catalog.bundle.name,
            price=catalog.bundle.price,
            original_price=catalog.bundle.original_price,
            savings=catalog.bundle.savings,
            purchased=store.has_all(catalog.product_ids),
        ),
    )


@router.get("/entitlements", response_model=EntitlementsOut)
def list_entitlements(request: Request) -> EntitlementsOut:
    store, _ = entitlements_from_request(request)
    return EntitlementsOut(granted=store.as_list())


@router.get(
    "/products/{product_id}/sections/{section_id}/topics/{position}",
    response_model=TopicOut,
)
def get_topic(
    product_id: str,
    section_id: str,
    position: int,
    request: Request,
    catalog: Catalog = Depends(get_catalog),
) -> TopicOut:
    """Rendered topic; full content is only served for unlocked products."""
    product = catalog.get(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Unknown product")
    section = product.get_section(section_id)
    if section is None or not 0 <= position < len(section.topics):
        raise HTTPException(status_code=404, detail="Unknown topic")
    store, _ = entitlements_from_request(request)
    if not store.is_granted(product.id):
        raise HTTPException(status_code=403, detail="Product not purchased")
    topic = section.topics[position]
    return TopicOut(
        product_id=product.id,
        section_id=section.id,
        position=position,
        title=topic.title,
        blocks=render_topic(topic.content).blocks(),
    )
