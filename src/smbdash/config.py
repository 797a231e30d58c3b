from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import logging
import os
import sys
from typing import Mapping


DEFAULT_API_URL = "http://localhost:3001/api"


@dataclass(frozen=True)
class AppPaths:
    base_dir: Path
    logs_dir: Path
    exports_dir: Path

    def ensure(self) -> "AppPaths":
        for d in (self.base_dir, self.logs_dir, self.exports_dir):
            d.mkdir(parents=True, exist_ok=True)
        return self


@dataclass(frozen=True)
class ApiSettings:
    base_url: str
    timeout: float = 10.0
    transactions_page_size: int = 10
    dashboard_fetch_limit: int = 1000
    low_stock_threshold: int = 10


def _platform_base(app_name: str) -> Path:
    if sys.platform.startswith("win"):
        return Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming"))) / app_name
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / app_name
    return Path.home() / f".{app_name.lower()}"


def get_app_paths(app_name: str = "SmbDashboard", env: Mapping[str, str] | None = None) -> AppPaths:
    """Per-user data directory; ``SMBDASH_HOME`` overrides the platform default."""
    env = os.environ if env is None else env
    override = (env.get("SMBDASH_HOME") or "").strip()
    base = Path(override).expanduser() if override else _platform_base(app_name)
    return AppPaths(base_dir=base, logs_dir=base / "logs", exports_dir=base / "exports").ensure()


def _env_number(env: Mapping[str, str], key: str, default, cast=float):
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def get_api_settings(env: Mapping[str, str] | None = None) -> ApiSettings:
    env = os.environ if env is None else env
    return ApiSettings(
        base_url=(env.get("SMBDASH_API_URL") or DEFAULT_API_URL).strip(),
        timeout=_env_number(env, "SMBDASH_API_TIMEOUT", 10.0),
        transactions_page_size=_env_number(env, "SMBDASH_PAGE_SIZE", 10, int),
        dashboard_fetch_limit=_env_number(env, "SMBDASH_FETCH_LIMIT", 1000, int),
        low_stock_threshold=_env_number(env, "SMBDASH_LOW_STOCK", 10, int),
    )


def get_log_level(env: Mapping[str, str] | None = None) -> int:
    env = os.environ if env is None else env
    level = getattr(logging, (env.get("SMBDASH_LOG_LEVEL") or "INFO").strip().upper(), None)
    return level if isinstance(level, int) else logging.INFO
