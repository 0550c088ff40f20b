from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urljoin, urlparse, urlunparse

_WHITESPACE = re.compile(r"\s+")
_NON_DIGIT = re.compile(r"[^0-9]")
_BRACKETED = re.compile(r"\[[^\]]+\]")
_QUANTITY = re.compile(r"^[0-9]+(ml|g|캡슐)", re.IGNORECASE)
_NON_WORD = re.compile(r"[^0-9a-zA-Z가-힣]")
_INGREDIENT_SEPARATORS = re.compile(r",|·|\n")

# Keyword table for effect tags. Order here is the order tags are emitted in.
EFFECT_KEYWORDS: Tuple[Tuple[str, re.Pattern[str]], ...] = (
    ("hydration", re.compile(r"수분|워터|hydra|moist")),
    ("elasticity", re.compile(r"탄력|리프팅|firm")),
    ("radiance", re.compile(r"미백|톤|glow|radiance|bright")),
    ("soothing", re.compile(r"트러블|진정|calm|soothing")),
    ("pore_care", re.compile(r"모공|pore")),
    ("sebum_control", re.compile(r"피지|지성|sebum|oil")),
)


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def normalize_price(price_text: Optional[str]) -> Optional[int]:
    """
    "23,900원" -> 23900. None when there is no text or no digit in it.
    """
    if not price_text:
        return None
    digits = _NON_DIGIT.sub("", price_text)
    return int(digits) if digits else None


def derive_brand_from_name(name: Optional[str]) -> Optional[str]:
    """
    Best-effort brand guess from a product name: drop "[...]" promos, take the first word.
    Quantity-looking words ("50ml", "30g") are not brands.
    """
    if not name:
        return None
    cleaned = _BRACKETED.sub("", name).strip()
    tokens = _WHITESPACE.split(cleaned)
    first = tokens[0] if tokens else ""
    if _QUANTITY.match(first):
        return None
    return _NON_WORD.sub("", first) or None


def derive_effect_tags(name: Optional[str]) -> List[str]:
    normalized = (name or "").lower()
    return [tag for tag, pattern in EFFECT_KEYWORDS if pattern.search(normalized)]


def split_ingredients(text: Optional[str]) -> List[str]:
    """Split an ingredient list on comma, middle dot and newline."""
    if not text:
        return []
    return [part.strip() for part in _INGREDIENT_SEPARATORS.split(text) if part.strip()]


def find_marked_key(keys: Iterable[str], marker: str) -> Optional[str]:
    return next((key for key in keys if marker in key), None)


# ---- URLs -------------------------------------------------------------------


def with_query_param(url: str, name: str, value: str) -> str:
    """
    Set (or replace) a single query parameter, keeping the others in order.
    """
    parts = urlparse(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != name]
    query.append((name, value))
    return urlunparse(parts._replace(query=urlencode(query)))


def query_param(url: str, name: str) -> Optional[str]:
    for key, value in parse_qsl(urlparse(url).query, keep_blank_values=True):
        if key == name:
            return value
    return None


def build_page_url(category_url: str, page_param: str, page: int) -> str:
    return with_query_param(category_url, page_param, str(page))


def build_detail_url(template: str, goods_param: str, goods_no: str,
                     category_param: str, category_id: Optional[str]) -> str:
    url = with_query_param(template, goods_param, goods_no)
    if category_id:
        url = with_query_param(url, category_param, category_id)
    return url


def resolve_href(base_url: str, href: Optional[str]) -> Optional[str]:
    """
    Absolute URL for an anchor target, or None for script/fragment-only targets.
    """
    if not href:
        return None
    href = href.strip()
    if not href or href.startswith("#") or href.lower().startswith("javascript:"):
        return None
    return urljoin(base_url, href)
