from __future__ import annotations

import logging
from typing import Any, AsyncContextManager, Callable, Optional

from .base import IngestReport, PipelineEngine
from .browser_engine import BrowserSession
from .enricher import DetailEnricher
from .pagination import PaginationDriver
from ..adapters.detail import DetailParser
from ..adapters.listing import ListingExtractor
from ..adapters.selectors import SelectorRegistry
from ..config import RunConfig
from ..normalizer import enrich_item

logger = logging.getLogger(__name__)

# Anything that opens a session exposing ``listing_page`` and ``detail_page``.
SessionFactory = Callable[[RunConfig], AsyncContextManager[Any]]


class IngestPipeline(PipelineEngine):
    """
    Listing pages -> detail pages -> enriched items, on one browser session.
    - Pagination owns page-level stop decisions.
    - The enricher owns item-level failures.
    - Persistence is left to the caller's sink so it happens once, after scraping.
    """
    def __init__(self, config: RunConfig, session_factory: Optional[SessionFactory] = None) -> None:
        self.config = config
        self.session_factory = session_factory or BrowserSession
        self.selectors = SelectorRegistry(config.selectors)

    async def run(self) -> IngestReport:
        cfg = self.config
        # Configuration problems must surface before the browser starts.
        cfg.validate()
        logger.info("Ingesting %s (pages=%s, mode=%s)", cfg.category_url, cfg.max_pages, cfg.mode)

        async with self.session_factory(cfg) as session:
            driver = PaginationDriver(cfg, session.listing_page, ListingExtractor(self.selectors))
            listings = await driver.run()
            report = IngestReport(pages_visited=driver.pages_visited, stop_reason=driver.stop_reason)

            if not listings:
                logger.warning("No products collected from %s", cfg.category_url)
                return report

            logger.info("Collecting detail info for %s products", len(listings))
            enricher = DetailEnricher(
                cfg,
                session.detail_page,
                DetailParser(self.selectors.resolve("detail_table"), cfg.ingredient_marker),
            )
            total = len(listings)
            for idx, item in enumerate(listings, start=1):
                if item.link:
                    logger.info("Detail (%s/%s) -> %s", idx, total, item.link)
                detail = await enricher.enrich(item)
                report.items.append(enrich_item(item, detail))

        logger.info("Collected %s items", len(report.items))
        return report
