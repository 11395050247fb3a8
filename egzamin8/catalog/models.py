"""
Catalog DTO: Product, Section, Topic, BundleOffer.
Immutable; loaded once from YAML and only read afterwards.
"""
from __future__ import annotations

from pydantic import BaseModel, Field


class Topic(BaseModel):
    """Topic has no id of its own; addressed by (section_id, position)."""

    title: str
    content: str = ""

    model_config = {"frozen": True}


class Section(BaseModel):
    id: str
    title: str
    topics: tuple[Topic, ...] = ()

    model_config = {"frozen": True}


class Product(BaseModel):
    id: str
    name: str
    icon: str = ""
    color: str = ""
    price: float
    checkout_link: str = ""
    description: str = ""
    sections: tuple[Section, ...] = ()

    model_config = {"frozen": True}

    @property
    def first_section_id(self) -> str | None:
        return self.sections[0].id if self.sections else None

    @property
    def topic_count(self) -> int:
        return sum(len(s.topics) for s in self.sections)

    def get_section(self, section_id: str | None) -> Section | None:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def section_ids(self) -> list[str]:
        return [s.id for s in self.sections]


class BundleOffer(BaseModel):
    """«Pakiet»: alias for every product in the catalog, sold with one link."""

    id: str = Field(..., description="Sentinel id, distinct from every product id")
    name: str = "Pakiet wszystkich przedmiotów"
    price: float
    original_price: float
    savings: float
    checkout_link: str = ""

    model_config = {"frozen": True}
