from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Protocol
from abc import ABC, abstractmethod

from ..adapters.base import EnrichedItem


@dataclass
class IngestReport:
    items: List[EnrichedItem] = field(default_factory=list)
    pages_visited: int = 0
    stop_reason: str = "max_pages"


class PageHandle(Protocol):
    """
    The slice of a Playwright ``Page`` the pipeline relies on.
    """
    async def goto(self, url: str, **kwargs: Any) -> Any: ...

    async def wait_for_timeout(self, timeout: float) -> None: ...

    async def content(self) -> str: ...

    def locator(self, selector: str) -> Any: ...


class PipelineEngine(ABC):
    """
    Abstract engine interface. Implementations own the ingestion lifecycle.
    """
    @abstractmethod
    async def run(self) -> IngestReport:  # pragma: no cover - interface
        ...
