from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from pathlib import Path

from ..adapters.base import EnrichedItem
from ..config import RunConfig

logger = logging.getLogger(__name__)


def snapshot_timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    stamp = now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return stamp.replace(":", "-").replace(".", "-")


def write_snapshot(records: List[Dict[str, Any]], output_dir: str, prefix: str) -> Path:
    """Dump records as indented JSON to ``<output_dir>/<prefix>-<timestamp>.json``."""
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{prefix}-{snapshot_timestamp()}.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(records, f, indent=2, ensure_ascii=False)
    return path


class SnapshotExporter:
    """
    Preview sink: writes the raw enriched items (not canonical records) to a local file.
    """
    mode = "preview"

    def __init__(self, config: RunConfig) -> None:
        self.config = config

    async def export(self, items: List[EnrichedItem]) -> str:
        prefix = self.config.source_name.lower()
        path = write_snapshot([item.to_dict() for item in items], self.config.output_dir, prefix)
        logger.info("Snapshot written: %s", path)
        return str(path)
