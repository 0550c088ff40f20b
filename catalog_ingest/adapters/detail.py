from __future__ import annotations

from typing import Dict, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from .base import DetailInfo
from ..utils.parsing import collapse_whitespace, find_marked_key, split_ingredients


def table_to_fields(table: Tag) -> Dict[str, str]:
    """Header cell -> data cell for every row that has both."""
    fields: Dict[str, str] = {}
    for row in table.select("tr"):
        header = row.find("th")
        cell = row.find("td")
        key = header.get_text().strip() if header is not None else ""
        value = collapse_whitespace(cell.get_text()) if cell is not None else ""
        if key and value:
            fields[key] = value
    return fields


class DetailParser:
    """
    Reads the product-information table of a detail page.
    The first selector that matches any element decides the table, even if its rows are empty.
    """

    def __init__(self, table_selectors: Sequence[str], ingredient_marker: str = "성분") -> None:
        self.table_selectors = tuple(table_selectors)
        self.ingredient_marker = ingredient_marker

    def parse(self, html: str) -> DetailInfo:
        soup = BeautifulSoup(html, "html.parser")
        fields = self._find_fields(soup)
        if fields is None:
            return DetailInfo.empty()

        key = find_marked_key(fields, self.ingredient_marker)
        ingredient_text = fields[key] if key else None
        return DetailInfo(
            fields=fields,
            ingredient_text=ingredient_text,
            ingredients=split_ingredients(ingredient_text),
        )

    def _find_fields(self, soup: BeautifulSoup) -> Optional[Dict[str, str]]:
        for selector in self.table_selectors:
            table = soup.select_one(selector)
            if table is not None:
                return table_to_fields(table)
        return None
