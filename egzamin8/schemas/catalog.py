from pydantic import BaseModel

from egzamin8.content.renderer import Block


class SectionOut(BaseModel):
    id: str
    title: str
    topics: list[str]


class ProductOut(BaseModel):
    id: str
    name: str
    icon: str
    price: float
    topic_count: int
    purchased: bool
    sections: list[SectionOut]


class BundleOut(BaseModel):
    id: str
    name: str
    price: float
    original_price: float
    savings: float
    purchased: bool  # every product of the catalog is granted


class CatalogOut(BaseModel):
    products: list[ProductOut]
    bundle: BundleOut


class EntitlementsOut(BaseModel):
    granted: list[str]


class TopicOut(BaseModel):
    product_id: str
    section_id: str
    position: int
    title: str
    blocks: list[Block]
