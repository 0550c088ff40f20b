from __future__ import annotations

from typing import List, Protocol

from ..adapters.base import EnrichedItem
from ..config import RunConfig
from ..utils.loader import load_symbol


class Sink(Protocol):
    """Persists one finished batch. Called exactly once per run."""

    mode: str

    async def export(self, items: List[EnrichedItem]) -> str:
        """Write the batch and return a human-readable destination."""
        ...


def load_sink(config: RunConfig) -> Sink:
    """
    Instantiate the sink configured for ``config.mode``.
    Sinks validate their own requirements in ``__init__`` so a bad setup fails before scraping.
    """
    sink_cls = load_symbol(config.sink_path)
    return sink_cls(config)
