from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from .base import ListingItem
from .selectors import SelectorRegistry
from ..utils.parsing import build_detail_url, query_param, resolve_href

# Attributes carrying the product id when a card has no usable anchor.
_GOODS_ATTRS = ("data-ref-goodsno", "data-goods-no")
_IMAGE_ATTRS = ("data-original", "data-src", "src")


@dataclass(frozen=True)
class PageContext:
    """What the extractor needs to know about the page besides its HTML."""

    page_url: str
    detail_url_template: str
    goods_param: str = "goodsNo"
    category_param: str = "dispCatNo"

    @property
    def category_id(self) -> Optional[str]:
        return query_param(self.page_url, self.category_param) or None


class ListingExtractor:
    """
    Pulls product cards out of a rendered listing page.
    Each field is read with its selector chain; the first selector that yields a value wins.
    """

    def __init__(self, selectors: SelectorRegistry) -> None:
        self.selectors = selectors

    def extract(self, html: str, context: PageContext) -> List[ListingItem]:
        soup = BeautifulSoup(html, "html.parser")
        items: List[ListingItem] = []
        for card in soup.select(self.selectors.joined("card")):
            item = self._extract_card(card, context)
            if item is not None:
                items.append(item)
        return items

    # ---- Extraction helpers -------------------------------------------------

    def _extract_card(self, card: Tag, context: PageContext) -> Optional[ListingItem]:
        root = card.find_parent("li") or card
        name = self._first_text(root, self.selectors.resolve("name"))
        if not name:
            return None

        link = self._first_href(root, self.selectors.resolve("link"), context.page_url)
        if not link:
            link = self._synthesized_link(root, context)

        return ListingItem(
            name=name,
            brand=self._first_text(root, self.selectors.resolve("brand")),
            price_text=self._first_text(root, self.selectors.resolve("price")),
            link=link,
            image_url=self._first_image(root, self.selectors.resolve("image")),
            tags=tuple(self._all_texts(root, self.selectors.joined("tag"))),
        )

    def _first_text(self, root: Tag, chain: Sequence[str]) -> Optional[str]:
        for selector in chain:
            text = self._text_or_none(root.select_one(selector))
            if text:
                return text
        return None

    def _first_href(self, root: Tag, chain: Sequence[str], base_url: str) -> Optional[str]:
        for selector in chain:
            node = root.select_one(selector)
            if node is None:
                continue
            href = resolve_href(base_url, node.get("href")) or resolve_href(base_url, node.get("data-href"))
            if href:
                return href
        return None

    def _first_image(self, root: Tag, chain: Sequence[str]) -> Optional[str]:
        for selector in chain:
            node = root.select_one(selector)
            if node is None:
                continue
            for attr in _IMAGE_ATTRS:
                src = node.get(attr)
                if src:
                    return src
        return None

    def _all_texts(self, root: Tag, selector: str) -> List[str]:
        texts = [self._text_or_none(node) for node in root.select(selector)]
        return [t for t in texts if t]

    def _synthesized_link(self, root: Tag, context: PageContext) -> Optional[str]:
        goods_no = next((root.get(attr) for attr in _GOODS_ATTRS if root.get(attr)), None)
        if not goods_no:
            nested = root.select_one("[data-ref-goodsno]")
            goods_no = nested.get("data-ref-goodsno") if nested is not None else None
        if not goods_no:
            return None
        category_id = root.get("data-ref-dispcatno") or context.category_id
        return build_detail_url(
            context.detail_url_template,
            context.goods_param,
            goods_no,
            context.category_param,
            category_id,
        )

    # ---- Text helpers -------------------------------------------------------

    def _text_or_none(self, node: Optional[Tag]) -> Optional[str]:
        if node is None:
            return None
        text = node.get_text().strip()
        return text or None
