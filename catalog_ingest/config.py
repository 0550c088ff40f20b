from __future__ import annotations

from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, Optional
from urllib.parse import urlparse
import os
import json

from .version import CONFIG_SCHEMA_VERSION

DEFAULT_CATEGORY_URL = (
    "https://www.oliveyoung.co.kr/store/display/getCategoryShop.do?dispCatNo=10000010001"
)
DEFAULT_GOODS_URL = "https://www.oliveyoung.co.kr/store/goods/getGoodsDetail.do"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

MODES = ("preview", "write")

# Selector fields that can be overridden through CATALOG_<FIELD>_SELECTOR.
SELECTOR_ENV = {
    "card": "CATALOG_CARD_SELECTOR",
    "name": "CATALOG_NAME_SELECTOR",
    "brand": "CATALOG_BRAND_SELECTOR",
    "price": "CATALOG_PRICE_SELECTOR",
    "link": "CATALOG_LINK_SELECTOR",
    "image": "CATALOG_IMAGE_SELECTOR",
    "tag": "CATALOG_TAG_SELECTOR",
    "detail_table": "CATALOG_INFO_TABLE_SELECTOR",
}


class ConfigError(ValueError):
    """Raised when the run cannot start because configuration is missing or invalid."""


@dataclass(frozen=True)
class RunConfig:
    """
    Resolved configuration for one ingestion run.
    Built once at startup and passed explicitly to every stage; never mutated afterwards
    (use ``dataclasses.replace`` to derive an overridden copy).
    """
    schema_version: int = CONFIG_SCHEMA_VERSION
    # Listing traversal
    category_url: str = DEFAULT_CATEGORY_URL
    page_param: str = "pageIdx"
    category_param: str = "dispCatNo"
    max_pages: int = 3
    # Waits and timeouts, in milliseconds
    wait_ms: int = 2000
    detail_wait_ms: int = 1200
    tab_wait_ms: int = 800
    tab_click_timeout_ms: int = 2000
    navigation_timeout_ms: int = 60000
    # Browser
    user_agent: str = DEFAULT_USER_AGENT
    headless: bool = True
    browsers_path: Optional[str] = None
    # Detail pages
    goods_detail_url: str = DEFAULT_GOODS_URL
    goods_param: str = "goodsNo"
    detail_tab_text: str = "상품정보 제공고시"
    ingredient_marker: str = "성분"
    # Field -> selector override (comma-separated string or list). Blank means "use default".
    selectors: Dict[str, Any] = field(default_factory=dict)
    # Record constants
    source_name: str = "OliveYoung"
    category_label: str = "스킨케어"
    # Persistence
    mode: str = "preview"
    output_dir: str = "crawler-output"
    store_url: Optional[str] = None
    store_key: Optional[str] = None
    store_table: str = "products"
    store_timeout: float = 30.0
    # Dotted paths for sinks, so persistence can be swapped without code changes.
    preview_sink: str = "catalog_ingest.export.json_exporter:SnapshotExporter"
    write_sink: str = "catalog_ingest.export.store_exporter:CatalogStoreExporter"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        # Never echo the service key into logs or snapshots.
        if data.get("store_key"):
            data["store_key"] = "***"
        return data

    @property
    def store_configured(self) -> bool:
        return bool(self.store_url and self.store_key)

    @property
    def sink_path(self) -> str:
        return self.write_sink if self.mode == "write" else self.preview_sink

    # ---------- Loaders ----------

    @classmethod
    def from_env(cls) -> "RunConfig":
        """
        Build config from environment variables (all optional).
        """
        def _get(name: str, default: str) -> str:
            return os.getenv(name, default)

        def _num(name: str, default: str, cast=int):
            raw = _get(name, default)
            try:
                return cast(raw)
            except ValueError:
                raise ConfigError(f"{name} must be a number, got {raw!r}") from None

        selectors = {
            field_name: os.environ[env_name]
            for field_name, env_name in SELECTOR_ENV.items()
            if env_name in os.environ
        }

        return cls(
            category_url=_get("CATALOG_CATEGORY_URL", DEFAULT_CATEGORY_URL).strip(),
            page_param=_get("CATALOG_PAGE_PARAM", "pageIdx"),
            category_param=_get("CATALOG_CATEGORY_PARAM", "dispCatNo"),
            max_pages=_num("CATALOG_MAX_PAGES", "3"),
            wait_ms=_num("CATALOG_WAIT_MS", "2000"),
            detail_wait_ms=_num("CATALOG_DETAIL_WAIT_MS", "1200"),
            tab_wait_ms=_num("CATALOG_TAB_WAIT_MS", "800"),
            navigation_timeout_ms=_num("CATALOG_NAV_TIMEOUT", "60000"),
            user_agent=_get("CATALOG_USER_AGENT", DEFAULT_USER_AGENT),
            headless=_get("CATALOG_HEADLESS", "1").lower() not in ("0", "false", "no"),
            browsers_path=os.getenv("CATALOG_BROWSERS_PATH") or None,
            goods_detail_url=_get("CATALOG_GOODS_URL", DEFAULT_GOODS_URL),
            detail_tab_text=_get("CATALOG_INFO_TAB_TEXT", "상품정보 제공고시"),
            ingredient_marker=_get("CATALOG_INGREDIENT_MARKER", "성분"),
            selectors=selectors,
            source_name=_get("CATALOG_SOURCE_NAME", "OliveYoung"),
            category_label=_get("CATALOG_CATEGORY_LABEL", "스킨케어"),
            output_dir=_get("CATALOG_OUTPUT_DIR", "crawler-output"),
            store_url=os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL") or None,
            store_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY") or None,
            store_table=_get("CATALOG_STORE_TABLE", "products"),
            store_timeout=_num("CATALOG_STORE_TIMEOUT", "30.0", float),
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "RunConfig":
        """
        Load configuration from a JSON file. Supports schema migration from older versions.
        Store credentials are not read from files; they come from the environment.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as exc:
            raise ConfigError(f"cannot read config file {path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(f"config file {path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"config file {path} must hold a JSON object")
        data = migrate_config(data)
        data.pop("store_key", None)
        data.setdefault("store_url", os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL") or None)
        data["store_key"] = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or None
        unknown = sorted(set(data) - {f.name for f in fields(cls)})
        if unknown:
            raise ConfigError(f"unknown config keys in {path}: {', '.join(unknown)}")
        return cls(**data)

    # ---------- Validation ----------

    def validate(self) -> None:
        if not self.category_url:
            raise ConfigError(
                "category_url is empty; pass a URL argument or set CATALOG_CATEGORY_URL."
            )
        if urlparse(self.category_url).scheme not in ("http", "https"):
            raise ConfigError(f"category_url must be an http(s) URL, got {self.category_url!r}")
        if not self.page_param:
            raise ConfigError("page_param cannot be empty")
        if self.max_pages < 1:
            raise ConfigError("max_pages must be >= 1")
        for name in ("wait_ms", "detail_wait_ms", "tab_wait_ms", "tab_click_timeout_ms"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be >= 0")
        if self.navigation_timeout_ms <= 0:
            raise ConfigError("navigation_timeout_ms must be > 0")
        unknown = sorted(set(self.selectors) - set(SELECTOR_ENV))
        if unknown:
            raise ConfigError(
                f"unknown selector fields: {', '.join(unknown)} (known: {', '.join(SELECTOR_ENV)})"
            )
        if self.mode not in MODES:
            raise ConfigError(f"mode must be one of {MODES}, got {self.mode!r}")
        if self.mode == "write" and not self.store_configured:
            raise ConfigError(
                "write mode needs the catalog store; set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY."
            )


def migrate_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Migrate config dict to the latest schema version.
    Keep this pure and additive. Add migrations here as you bump schema.
    """
    raw = dict(raw)
    schema = raw.get("schema_version", 1)

    if schema < 2:
        # v1 stored selector overrides as top-level "<field>_selector" keys.
        selectors = dict(raw.get("selectors") or {})
        for field_name in SELECTOR_ENV:
            legacy = raw.pop(f"{field_name}_selector", None)
            if legacy is not None:
                selectors.setdefault(field_name, legacy)
        raw["selectors"] = selectors

    raw["schema_version"] = CONFIG_SCHEMA_VERSION
    return raw
