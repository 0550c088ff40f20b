from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..adapters.base import EnrichedItem
from ..config import ConfigError, RunConfig
from ..normalizer import canonical_from_enriched
from ..utils.http import create_session, post_json

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """The catalog store rejected or never received the batch insert."""


class CatalogStoreExporter:
    """
    Write sink: maps every item to a canonical record and inserts the whole batch
    with a single request to the store's REST endpoint (Supabase/PostgREST).
    """
    mode = "write"

    def __init__(self, config: RunConfig) -> None:
        if not config.store_configured:
            raise ConfigError(
                "catalog store is not configured; set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY."
            )
        self.config = config
        self.endpoint = f"{config.store_url.rstrip('/')}/rest/v1/{config.store_table}"

    def build_payload(self, items: List[EnrichedItem]) -> List[Dict[str, Any]]:
        return [canonical_from_enriched(item, self.config).to_dict() for item in items]

    def _headers(self) -> Dict[str, str]:
        key = self.config.store_key or ""
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
            "Prefer": "return=minimal",
        }

    async def export(self, items: List[EnrichedItem]) -> str:
        payload = self.build_payload(items)
        session = create_session()
        try:
            await post_json(
                session,
                self.endpoint,
                payload,
                headers=self._headers(),
                timeout=self.config.store_timeout,
            )
        except Exception as exc:
            raise StoreError(f"insert into {self.config.store_table!r} failed: {exc}") from exc
        finally:
            await session.close()
        logger.info("Inserted %s records into %s", len(payload), self.config.store_table)
        return f"{self.config.store_table} ({len(payload)} rows)"
