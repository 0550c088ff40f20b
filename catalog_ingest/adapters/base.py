from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class ListingItem:
    """One product card as scraped from a listing page."""

    name: str
    brand: Optional[str] = None
    price_text: Optional[str] = None
    link: Optional[str] = None
    image_url: Optional[str] = None
    tags: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "brand": self.brand,
            "price": self.price_text,
            "link": self.link,
            "image": self.image_url,
            "tags": list(self.tags),
        }


@dataclass(frozen=True)
class DetailInfo:
    """Attributes read from a product's own page. ``ingredients`` is always a list."""

    fields: Optional[Dict[str, str]] = None
    ingredient_text: Optional[str] = None
    ingredients: List[str] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "DetailInfo":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "info": dict(self.fields) if self.fields is not None else None,
            "ingredientText": self.ingredient_text,
            "ingredients": list(self.ingredients),
        }


@dataclass(frozen=True)
class CanonicalRecord:
    """Persistence-ready representation of one product (store column names on export)."""

    name: str
    brand: Optional[str]
    category: str
    effect_tags: List[str]
    key_ingredients: List[str]
    image_url: Optional[str]
    note: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "brand": self.brand,
            "category": self.category,
            "effect_tags": list(self.effect_tags),
            "key_ingredients": list(self.key_ingredients),
            "image_url": self.image_url,
            "note": self.note,
        }


@dataclass
class EnrichedItem:
    """
    A listing item after the detail stage, before normalization.
    This is what preview snapshots contain.
    """

    item: ListingItem
    detail: DetailInfo = field(default_factory=DetailInfo.empty)
    brand: Optional[str] = None
    price_value: Optional[int] = None
    effect_tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = self.item.to_dict()
        data.update(
            {
                "brand": self.brand,
                "priceValue": self.price_value,
                "effectTags": list(self.effect_tags),
                "detail": self.detail.to_dict(),
                "ingredients": list(self.detail.ingredients),
            }
        )
        return data


# ---- Page outcomes ----------------------------------------------------------


@dataclass
class PageItems:
    items: List[ListingItem]


@dataclass
class EmptyPage:
    pass


@dataclass
class PageFault:
    error: BaseException


PageOutcome = Union[PageItems, EmptyPage, PageFault]
