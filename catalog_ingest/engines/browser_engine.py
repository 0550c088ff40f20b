from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional

from playwright.async_api import Browser, Page, Playwright, async_playwright

from ..config import RunConfig

logger = logging.getLogger(__name__)


def use_browsers_path(path: Optional[str]) -> None:
    """Point Playwright at a private browser install dir (must be set before launch)."""
    if not path:
        return
    p = Path(path).expanduser()
    p.mkdir(parents=True, exist_ok=True)
    os.environ.setdefault("PLAYWRIGHT_BROWSERS_PATH", str(p))


class BrowserSession:
    """
    One headless Chromium with two long-lived pages: one walks the listing,
    the other visits product detail pages. Both are reused for the whole run.
    """

    def __init__(self, config: RunConfig) -> None:
        self.config = config
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self.listing_page: Optional[Page] = None
        self.detail_page: Optional[Page] = None

    async def __aenter__(self) -> "BrowserSession":
        use_browsers_path(self.config.browsers_path)
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(headless=self.config.headless)
            self.listing_page = await self._new_page()
            self.detail_page = await self._new_page()
        except BaseException:
            await self.close()
            raise
        logger.debug("Browser session started (headless=%s)", self.config.headless)
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _new_page(self) -> Page:
        if self._browser is None:
            raise RuntimeError("browser session is not started")
        page = await self._browser.new_page()
        await page.set_extra_http_headers({"User-Agent": self.config.user_agent})
        page.set_default_navigation_timeout(self.config.navigation_timeout_ms)
        return page

    async def close(self) -> None:
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as exc:
                logger.debug("Browser close failed: %r", exc)
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
