from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional
import logging

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from ..config import ConfigError, RunConfig
from ..engines.base import IngestReport
from ..engines.pipeline import IngestPipeline, SessionFactory
from ..export.base import load_sink
from ..version import __version__

logger = logging.getLogger(__name__)

app = FastAPI(title="catalog_ingest API", version=__version__)


class IngestRequest(BaseModel):
    category_url: Optional[str] = None
    pages: Optional[int] = None
    write: bool = False


def get_session_factory() -> Optional[SessionFactory]:
    """Browser session factory; ``None`` means a real headless browser."""
    return None


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/ingest")
async def ingest(
    req: IngestRequest,
    session_factory: Optional[SessionFactory] = Depends(get_session_factory),
) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if req.category_url:
        overrides["category_url"] = req.category_url
    if req.pages is not None:
        overrides["max_pages"] = req.pages
    if req.write:
        overrides["mode"] = "write"

    try:
        cfg = replace(RunConfig.from_env(), **overrides)
        cfg.validate()
        sink = load_sink(cfg)
    except ConfigError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    report: IngestReport = await IngestPipeline(cfg, session_factory=session_factory).run()
    if not report.items:
        raise HTTPException(
            status_code=422,
            detail=f"no items collected (pages visited: {report.pages_visited}, stop: {report.stop_reason})",
        )

    try:
        destination = await sink.export(report.items)
    except Exception as exc:
        logger.error("Persisting %s items failed: %s", len(report.items), exc)
        raise HTTPException(status_code=502, detail=f"persistence failed: {exc}") from exc

    return {
        "count": len(report.items),
        "pages_visited": report.pages_visited,
        "stop_reason": report.stop_reason,
        "destination": destination,
    }
