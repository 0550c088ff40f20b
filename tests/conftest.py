"""
Shared fixtures: fake page handles standing in for Playwright pages, and
HTML builders shaped like the listing/detail markup the default selectors expect.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence

import pytest

from catalog_ingest.config import RunConfig
from catalog_ingest.utils.parsing import query_param

CATEGORY_URL = "https://shop.example.com/store/display/getCategoryShop.do?dispCatNo=100001"
GOODS_URL = "https://shop.example.com/store/goods/getGoodsDetail.do"


# ---------------------------------------------------------------------------
# HTML builders
# ---------------------------------------------------------------------------


def card_html(
    name: Optional[str] = "라운드랩 독도 토너 200ml",
    *,
    brand: Optional[str] = "라운드랩",
    price: Optional[str] = "23,900",
    href: Optional[str] = "/store/goods/getGoodsDetail.do?goodsNo=A000000001",
    image: Optional[Dict[str, str]] = None,
    tags: Sequence[str] = (),
    goods_no: Optional[str] = None,
) -> str:
    li_attrs = f' data-ref-goodsno="{goods_no}"' if goods_no else ""
    image = image if image is not None else {"data-original": "https://img.example.com/1.jpg",
                                             "src": "https://img.example.com/blank.gif"}
    img_attrs = " ".join(f'{k}="{v}"' for k, v in image.items())
    parts = [f"<li{li_attrs}>", '<div class="prd_info">']
    if href is not None:
        parts.append(f'<a href="{href}" class="thumb"><img {img_attrs}></a>')
    else:
        parts.append(f"<img {img_attrs}>")
    if brand is not None:
        parts.append(f'<span class="tx_brand">{brand}</span>')
    if name is not None:
        parts.append(f'<p class="tx_name">{name}</p>')
    if price is not None:
        parts.append(f'<p class="tx_price"><span class="tx_num">{price}</span>원</p>')
    if tags:
        parts.append('<div class="tag_area">' + "".join(f'<span class="tag">{t}</span>' for t in tags) + "</div>")
    parts.append("</div></li>")
    return "".join(parts)


def listing_html(cards: Sequence[str]) -> str:
    return "<html><body><ul class='cate_prd_list'>" + "".join(cards) + "</ul></body></html>"


def numbered_cards(count: int, start: int = 1) -> List[str]:
    return [
        card_html(f"상품 {i} 수분크림", href=f"/store/goods/getGoodsDetail.do?goodsNo=A{i:09d}")
        for i in range(start, start + count)
    ]


def detail_html(rows: Dict[str, str], table_class: str = "goods_info_area") -> str:
    body = "".join(f"<tr><th>{k}</th><td>{v}</td></tr>" for k, v in rows.items())
    return f"<html><body><div class='{table_class}'><table>{body}</table></div></body></html>"


# ---------------------------------------------------------------------------
# Fake Playwright objects
# ---------------------------------------------------------------------------


class FakeLocator:
    def __init__(self, count: int = 0, click_error: Optional[BaseException] = None) -> None:
        self._count = count
        self.click_error = click_error
        self.clicks: List[Optional[float]] = []

    @property
    def first(self) -> "FakeLocator":
        return self

    async def count(self) -> int:
        return self._count

    async def click(self, timeout: Optional[float] = None) -> None:
        self.clicks.append(timeout)
        if self.click_error is not None:
            raise self.click_error


class FakePage:
    """
    Records navigation and waits; serves HTML from ``responder(url)``.
    ``errors`` maps URLs to exceptions raised by ``goto``.
    """

    def __init__(
        self,
        responder: Callable[[str], str],
        *,
        errors: Optional[Dict[str, BaseException]] = None,
        tab: Optional[FakeLocator] = None,
    ) -> None:
        self.responder = responder
        self.errors = errors or {}
        self.tab = tab or FakeLocator()
        self.visited: List[str] = []
        self.goto_kwargs: List[dict] = []
        self.waits: List[float] = []
        self.locators: List[str] = []
        self.current: Optional[str] = None

    async def goto(self, url: str, **kwargs) -> None:
        self.visited.append(url)
        self.goto_kwargs.append(kwargs)
        if url in self.errors:
            raise self.errors[url]
        self.current = url

    async def wait_for_timeout(self, timeout: float) -> None:
        self.waits.append(timeout)

    async def content(self) -> str:
        assert self.current is not None, "content() before goto()"
        return self.responder(self.current)

    def locator(self, selector: str) -> FakeLocator:
        self.locators.append(selector)
        return self.tab


class FakeSession:
    def __init__(self, listing_page: FakePage, detail_page: FakePage) -> None:
        self.listing_page = listing_page
        self.detail_page = detail_page
        self.entered = False
        self.exited = False

    async def __aenter__(self) -> "FakeSession":
        self.entered = True
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.exited = True


class SessionFactory:
    def __init__(self, listing_page: FakePage, detail_page: FakePage) -> None:
        self.session = FakeSession(listing_page, detail_page)
        self.calls = 0

    def __call__(self, config: RunConfig) -> FakeSession:
        self.calls += 1
        return self.session


def paged_listing(pages: Sequence[str], page_param: str = "pageIdx") -> Callable[[str], str]:
    """Responder serving ``pages[n-1]`` for ``?pageIdx=n`` and an empty listing past the end."""
    def respond(url: str) -> str:
        idx = int(query_param(url, page_param) or "1")
        return pages[idx - 1] if idx <= len(pages) else listing_html([])
    return respond


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config() -> RunConfig:
    return RunConfig(
        category_url=CATEGORY_URL,
        goods_detail_url=GOODS_URL,
        max_pages=5,
        wait_ms=10,
        detail_wait_ms=5,
        tab_wait_ms=3,
    )


@pytest.fixture()
def make_page() -> Callable[..., FakePage]:
    return FakePage


@pytest.fixture()
def make_locator() -> Callable[..., FakeLocator]:
    return FakeLocator


@pytest.fixture()
def make_session_factory() -> Callable[[FakePage, FakePage], SessionFactory]:
    return SessionFactory


@pytest.fixture()
def html():
    """HTML builders bundled for tests that need several of them."""
    class _Builders:
        card = staticmethod(card_html)
        listing = staticmethod(listing_html)
        numbered = staticmethod(numbered_cards)
        detail = staticmethod(detail_html)
        paged = staticmethod(paged_listing)
    return _Builders


@pytest.fixture()
def clean_env(monkeypatch, tmp_path):
    """No store credentials, no stray .env, cwd in a temp dir."""
    for name in ("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY",
                 "CATALOG_CATEGORY_URL", "CATALOG_MAX_PAGES", "CATALOG_OUTPUT_DIR"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
