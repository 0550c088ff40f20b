from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

from dotenv import find_dotenv, load_dotenv

from ..config import ConfigError, RunConfig
from ..engines.base import IngestReport
from ..engines.pipeline import IngestPipeline, SessionFactory
from ..export.base import load_sink
from ..export.json_exporter import write_snapshot
from ..normalizer import canonical_from_enriched
from ..utils.logging import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_PERSISTENCE_FAILED = 3


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Catalog ingestion crawler")
    p.add_argument("url", nargs="?", default=None,
                   help="Category listing URL (default from config / CATALOG_CATEGORY_URL)")
    p.add_argument("--pages", type=int, default=None, help="Max listing pages (default from config)")
    p.add_argument("--write", action="store_true",
                   help="Insert canonical records into the catalog store instead of writing a snapshot")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON")
    p.add_argument("--output-dir", type=str, default=None, help="Snapshot directory (preview mode)")
    p.add_argument("--log-level", type=str, default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    p.add_argument("--serve", action="store_true", help="Run the trigger API instead of a one-off ingest")
    p.add_argument("--host", type=str, default="127.0.0.1", help="API host (when --serve)")
    p.add_argument("--port", type=int, default=8000, help="API port (when --serve)")
    return p


def _load_config(args: argparse.Namespace) -> RunConfig:
    load_dotenv(find_dotenv(usecwd=True))
    if args.config:
        cfg = RunConfig.from_file(args.config)
    else:
        cfg = RunConfig.from_env()

    overrides: Dict[str, Any] = {}
    if args.url:
        overrides["category_url"] = args.url.strip()
    if args.pages is not None:
        overrides["max_pages"] = args.pages
    if args.write:
        overrides["mode"] = "write"
    if args.output_dir:
        overrides["output_dir"] = args.output_dir

    cfg = replace(cfg, **overrides)
    cfg.validate()
    logger.debug("Resolved config: %s", cfg.to_dict())
    return cfg


def run_server(host: str, port: int) -> None:
    import uvicorn

    uvicorn.run("catalog_ingest.apis.app:app", host=host, port=port)


def _save_unsaved(cfg: RunConfig, report: IngestReport) -> None:
    records = [canonical_from_enriched(item, cfg).to_dict() for item in report.items]
    path = write_snapshot(records, cfg.output_dir, f"{cfg.source_name.lower()}-unsaved")
    logger.warning("Unsaved records written to %s", path)


def run_cli(argv: List[str] | None = None, session_factory: Optional[SessionFactory] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.serve:
        run_server(args.host, args.port)
        return EXIT_OK

    try:
        cfg = _load_config(args)
        # Built before scraping so a sink that cannot work stops the run early.
        sink = load_sink(cfg)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_FAILURE

    pipeline = IngestPipeline(cfg, session_factory=session_factory)
    try:
        report: IngestReport = asyncio.run(pipeline.run())
    except Exception:
        logger.exception("Ingestion run failed")
        return EXIT_FAILURE

    if not report.items:
        logger.error("No items collected (pages visited: %s, stop: %s)",
                     report.pages_visited, report.stop_reason)
        return EXIT_FAILURE

    logger.info("Total items: %s | Pages: %s | Stop: %s",
                len(report.items), report.pages_visited, report.stop_reason)

    try:
        destination = asyncio.run(sink.export(report.items))
    except Exception as exc:
        logger.error("Persisting %s items failed: %s", len(report.items), exc)
        if cfg.mode == "write":
            try:
                _save_unsaved(cfg, report)
            except OSError as save_exc:
                logger.error("Could not write unsaved records to %s: %s", cfg.output_dir, save_exc)
        return EXIT_PERSISTENCE_FAILED

    logger.info("Saved %s items | Mode: %s | Output: %s", len(report.items), sink.mode, destination)
    return EXIT_OK
