from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from ..config import ConfigError

SelectorChain = Tuple[str, ...]

# Built-in chains, tried left to right.
DEFAULT_SELECTORS: Dict[str, SelectorChain] = {
    "card": ("li .prd_info", ".prd_info"),
    "name": (".tx_name", ".prd_name", ".name"),
    "brand": (".tx_brand", ".prd_brand", ".brand"),
    "price": (".tx_price .tx_num", ".tx_num", ".price"),
    "link": (".prd_thumb a", ".prd_info a"),
    "image": ("img[data-original]", "img[data-src]", "img[src]"),
    "tag": (".tag_area .tag", ".tag_list .tag"),
    "detail_table": (".goods_info_area table", ".prd_detail_info table", ".tbl_info"),
}


def to_chain(value: Any) -> SelectorChain:
    """Turn a comma-separated string or an iterable of strings into a cleaned chain."""
    if value is None:
        return ()
    if isinstance(value, str):
        parts: Iterable[str] = value.split(",")
    else:
        parts = value
    return tuple(p.strip() for p in parts if isinstance(p, str) and p.strip())


class SelectorRegistry:
    """
    Ordered fallback selector chains per field.
    Overrides replace a field's default chain wholesale; blank overrides are ignored.
    """
    def __init__(self, overrides: Optional[Mapping[str, Any]] = None) -> None:
        self._chains: Dict[str, SelectorChain] = dict(DEFAULT_SELECTORS)
        for field_name, value in (overrides or {}).items():
            self.register(field_name, value)

    # ---- Introspection / Management ----

    def register(self, field_name: str, value: Any) -> None:
        if field_name not in DEFAULT_SELECTORS:
            raise ConfigError(f"unknown selector field: {field_name!r}")
        chain = to_chain(value)
        if chain:
            self._chains[field_name] = chain

    def resolve(self, field_name: str) -> SelectorChain:
        return self._chains[field_name]

    def joined(self, field_name: str) -> str:
        """Chain as one CSS selector group, for "match any" queries."""
        return ", ".join(self.resolve(field_name))

    @property
    def fields(self) -> Tuple[str, ...]:
        return tuple(self._chains)
