from __future__ import annotations

import logging

from .base import PageHandle
from ..adapters.base import DetailInfo, ListingItem
from ..adapters.detail import DetailParser
from ..config import RunConfig

logger = logging.getLogger(__name__)


class DetailEnricher:
    """
    Visits each product's detail page on a dedicated page handle and reads its
    information table. A failing product degrades to an empty ``DetailInfo``.
    """

    def __init__(self, config: RunConfig, page: PageHandle, parser: DetailParser) -> None:
        self.config = config
        self.page = page
        self.parser = parser

    async def enrich(self, item: ListingItem) -> DetailInfo:
        if item.link is None:
            return DetailInfo.empty()
        try:
            return await self.fetch(item.link)
        except Exception as exc:
            logger.warning("Detail fetch failed for %s: %r", item.link, exc)
            return DetailInfo.empty()

    async def fetch(self, link: str) -> DetailInfo:
        cfg = self.config
        await self.page.goto(link, wait_until="domcontentloaded", timeout=cfg.navigation_timeout_ms)
        await self.page.wait_for_timeout(cfg.detail_wait_ms)

        if await self._open_info_tab():
            await self.page.wait_for_timeout(cfg.tab_wait_ms)

        return self.parser.parse(await self.page.content())

    async def _open_info_tab(self) -> bool:
        """Click the tab labelled ``detail_tab_text`` if present. Returns whether it exists."""
        tab = self.page.locator(f"text={self.config.detail_tab_text}").first
        if await tab.count() == 0:
            return False
        try:
            await tab.click(timeout=self.config.tab_click_timeout_ms)
        except Exception as exc:
            # The table is often rendered without the click.
            logger.debug("Info tab click failed: %r", exc)
        return True
