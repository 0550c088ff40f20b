from __future__ import annotations

import json
import logging

from catalog_ingest.export.store_exporter import CatalogStoreExporter, StoreError
from catalog_ingest.ui.cli import EXIT_FAILURE, EXIT_OK, EXIT_PERSISTENCE_FAILED, build_arg_parser, run_cli

CATEGORY_URL = "https://shop.example.com/store/display/getCategoryShop.do?dispCatNo=100001"


def test_arg_parser_defaults() -> None:
    args = build_arg_parser().parse_args([])
    assert args.url is None
    assert args.pages is None
    assert args.write is False


def test_write_without_store_exits_before_navigation(clean_env, make_page, make_session_factory) -> None:
    listing = make_page(lambda url: "")
    factory = make_session_factory(listing, make_page(lambda url: ""))

    code = run_cli(["--write", CATEGORY_URL, "--pages", "2"], session_factory=factory)

    assert code == EXIT_FAILURE
    assert factory.calls == 0
    assert listing.visited == []


def test_invalid_url_is_a_config_failure(clean_env, make_page, make_session_factory) -> None:
    factory = make_session_factory(make_page(lambda url: ""), make_page(lambda url: ""))
    assert run_cli(["ftp://shop.example.com/list"], session_factory=factory) == EXIT_FAILURE
    assert factory.calls == 0


def test_preview_run_writes_snapshot(clean_env, make_page, make_session_factory, html) -> None:
    listing = make_page(html.paged([html.listing(html.numbered(3))]))
    detail = make_page(lambda url: html.detail({"전성분": "정제수, 글리세린"}))
    out = clean_env / "out"

    code = run_cli([CATEGORY_URL, "--pages", "4", "--output-dir", str(out)],
                   session_factory=make_session_factory(listing, detail))

    assert code == EXIT_OK
    [snapshot] = list(out.glob("oliveyoung-*.json"))
    data = json.loads(snapshot.read_text(encoding="utf-8"))
    assert [row["name"] for row in data] == ["상품 1 수분크림", "상품 2 수분크림", "상품 3 수분크림"]
    assert data[0]["ingredients"] == ["정제수", "글리세린"]


def test_empty_catalog_exits_non_zero(clean_env, make_page, make_session_factory, html) -> None:
    listing = make_page(lambda url: html.listing([]))
    detail = make_page(lambda url: "")
    out = clean_env / "out"

    code = run_cli([CATEGORY_URL, "--output-dir", str(out)], session_factory=make_session_factory(listing, detail))

    assert code == EXIT_FAILURE
    assert detail.visited == []
    assert not out.exists()


def test_store_failure_saves_records_and_exits_distinctly(clean_env, monkeypatch, make_page,
                                                          make_session_factory, html) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://proj.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-key")

    async def refuse(self, items):
        raise StoreError("insert into 'products' failed: 503")

    monkeypatch.setattr(CatalogStoreExporter, "export", refuse)
    listing = make_page(html.paged([html.listing(html.numbered(2))]))
    detail = make_page(lambda url: html.detail({"성분": "A"}))
    out = clean_env / "out"

    code = run_cli(["--write", CATEGORY_URL, "--output-dir", str(out)],
                   session_factory=make_session_factory(listing, detail))

    assert code == EXIT_PERSISTENCE_FAILED
    [fallback] = list(out.glob("oliveyoung-unsaved-*.json"))
    records = json.loads(fallback.read_text(encoding="utf-8"))
    assert [r["key_ingredients"] for r in records] == [["A"], ["A"]]
    assert records[0]["category"] == "스킨케어"


def test_browser_failure_exits_non_zero(clean_env) -> None:
    class BrokenSession:
        async def __aenter__(self):
            raise RuntimeError("Executable doesn't exist")

        async def __aexit__(self, *exc_info):
            return None

    assert run_cli([CATEGORY_URL], session_factory=lambda cfg: BrokenSession()) == EXIT_FAILURE


def test_non_numeric_env_is_a_config_failure(clean_env, monkeypatch, make_page, make_session_factory) -> None:
    monkeypatch.setenv("CATALOG_MAX_PAGES", "abc")
    factory = make_session_factory(make_page(lambda url: ""), make_page(lambda url: ""))

    assert run_cli([CATEGORY_URL], session_factory=factory) == EXIT_FAILURE
    assert factory.calls == 0


def test_unknown_selector_in_config_file_is_a_config_failure(clean_env, make_page, make_session_factory) -> None:
    path = clean_env / "ingest.json"
    path.write_text(json.dumps({"schema_version": 2, "selectors": {"title": ".x"}}), encoding="utf-8")
    factory = make_session_factory(make_page(lambda url: ""), make_page(lambda url: ""))

    assert run_cli(["--config", str(path), CATEGORY_URL], session_factory=factory) == EXIT_FAILURE
    assert factory.calls == 0


def test_unwritable_fallback_keeps_persistence_exit_code(clean_env, monkeypatch, make_page,
                                                         make_session_factory, html) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://proj.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-key")

    async def refuse(self, items):
        raise StoreError("insert into 'products' failed: 503")

    monkeypatch.setattr(CatalogStoreExporter, "export", refuse)
    # A plain file where the output directory should go.
    blocked = clean_env / "out"
    blocked.write_text("", encoding="utf-8")
    listing = make_page(html.paged([html.listing(html.numbered(1))]))
    detail = make_page(lambda url: html.detail({"성분": "A"}))

    code = run_cli(["--write", CATEGORY_URL, "--output-dir", str(blocked)],
                   session_factory=make_session_factory(listing, detail))

    assert code == EXIT_PERSISTENCE_FAILED


def test_resolved_config_is_logged_without_key(clean_env, monkeypatch, caplog, make_page,
                                               make_session_factory, html) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://proj.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-key")
    caplog.set_level(logging.DEBUG, logger="catalog_ingest.ui.cli")
    listing = make_page(lambda url: html.listing([]))

    run_cli([CATEGORY_URL], session_factory=make_session_factory(listing, make_page(lambda url: "")))

    [line] = [r.getMessage() for r in caplog.records if r.getMessage().startswith("Resolved config")]
    assert "'store_key': '***'" in line
    assert "service-key" not in line
