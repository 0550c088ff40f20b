from __future__ import annotations

import logging
from typing import List

from .base import PageHandle
from ..adapters.base import EmptyPage, ListingItem, PageFault, PageItems, PageOutcome
from ..adapters.listing import ListingExtractor, PageContext
from ..config import RunConfig
from ..utils.parsing import build_page_url

logger = logging.getLogger(__name__)


class PaginationDriver:
    """
    Walks ``category_url`` page by page until max_pages, an empty page, or a failure.
    Stopping early is never fatal; whatever was collected so far is kept.
    """

    def __init__(self, config: RunConfig, page: PageHandle, extractor: ListingExtractor) -> None:
        self.config = config
        self.page = page
        self.extractor = extractor
        self.pages_visited = 0
        self.stop_reason = "max_pages"

    async def fetch_page(self, page_no: int) -> PageOutcome:
        cfg = self.config
        url = build_page_url(cfg.category_url, cfg.page_param, page_no)
        logger.info("Fetching listing page %s: %s", page_no, url)
        try:
            await self.page.goto(url, wait_until="domcontentloaded", timeout=cfg.navigation_timeout_ms)
            await self.page.wait_for_timeout(cfg.wait_ms)
            html = await self.page.content()
            context = PageContext(
                page_url=url,
                detail_url_template=cfg.goods_detail_url,
                goods_param=cfg.goods_param,
                category_param=cfg.category_param,
            )
            items = self.extractor.extract(html, context)
        except Exception as exc:
            return PageFault(error=exc)
        if not items:
            return EmptyPage()
        return PageItems(items=items)

    async def run(self) -> List[ListingItem]:
        collected: List[ListingItem] = []
        page_no = 1
        while page_no <= self.config.max_pages:
            outcome = await self.fetch_page(page_no)
            self.pages_visited = page_no

            if isinstance(outcome, EmptyPage):
                logger.info("Page %s has no products; stopping pagination", page_no)
                self.stop_reason = "empty_page"
                break
            if isinstance(outcome, PageFault):
                logger.error("Page %s failed, keeping %s items collected so far: %r",
                             page_no, len(collected), outcome.error)
                self.stop_reason = "page_fault"
                break

            logger.info("Page %s: %s products", page_no, len(outcome.items))
            collected.extend(outcome.items)
            page_no += 1
        return collected
