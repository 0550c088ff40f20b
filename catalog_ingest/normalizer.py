from __future__ import annotations

from typing import List, Optional

from .adapters.base import CanonicalRecord, DetailInfo, EnrichedItem, ListingItem
from .config import RunConfig
from .utils.parsing import derive_brand_from_name, derive_effect_tags, normalize_price


def resolve_brand(item: ListingItem) -> Optional[str]:
    return item.brand if item.brand is not None else derive_brand_from_name(item.name)


def resolve_effect_tags(item: ListingItem) -> List[str]:
    # Scraped tags win over keyword guesses.
    if item.tags:
        return list(item.tags)
    return derive_effect_tags(item.name)


def provenance_note(source_name: str, item: ListingItem) -> str:
    return f"{source_name} | {item.price_text or ''} | {item.link or ''}"


def enrich_item(item: ListingItem, detail: DetailInfo) -> EnrichedItem:
    """Attach detail info and the derived fields kept in raw snapshots."""
    return EnrichedItem(
        item=item,
        detail=detail,
        brand=resolve_brand(item),
        price_value=normalize_price(item.price_text),
        effect_tags=resolve_effect_tags(item),
    )


def to_canonical_record(item: ListingItem, detail: DetailInfo, config: RunConfig) -> CanonicalRecord:
    """
    Pure mapping from a scraped item and its detail info to the persisted record.
    Depends only on its inputs, so repeated calls produce equal records.
    """
    return CanonicalRecord(
        name=item.name,
        brand=resolve_brand(item),
        category=config.category_label,
        effect_tags=resolve_effect_tags(item),
        key_ingredients=list(detail.ingredients),
        image_url=item.image_url,
        note=provenance_note(config.source_name, item),
    )


def canonical_from_enriched(enriched: EnrichedItem, config: RunConfig) -> CanonicalRecord:
    return to_canonical_record(enriched.item, enriched.detail, config)
