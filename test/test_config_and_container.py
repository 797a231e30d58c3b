import json
import logging
import sys
from pathlib import Path

import pytest

from conftest import FakeResponse, FakeSession
from smbdash.application.container import build_container
from smbdash.config import DEFAULT_API_URL, ApiSettings, get_api_settings, get_app_paths, get_log_level
from smbdash.logging_config import JsonFormatter, setup_logging, teardown_logging


def test_api_settings_from_environment():
    settings = get_api_settings({"SMBDASH_API_URL": "http://shop.local/api/", "SMBDASH_API_TIMEOUT": "3"})
    assert settings.base_url == "http://shop.local/api/"
    assert settings.timeout == 3.0


def test_api_settings_defaults_and_bad_timeout():
    assert get_api_settings({}).base_url == DEFAULT_API_URL
    assert get_api_settings({"SMBDASH_API_TIMEOUT": "soon"}).timeout == 10.0


@pytest.mark.skipif(sys.platform.startswith("win") or sys.platform == "darwin", reason="posix home layout")
def test_app_paths_are_created_under_home(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("SMBDASH_HOME", raising=False)

    paths = get_app_paths("SmbDashboard")

    assert paths.base_dir == tmp_path / ".smbdashboard"
    assert paths.logs_dir.is_dir()
    assert paths.exports_dir.is_dir()


def test_container_wires_services_to_one_repository():
    session = FakeSession(FakeResponse(200, {"transactions": []}))
    settings = ApiSettings(base_url="http://api.test/api", timeout=2, transactions_page_size=5)

    c = build_container(settings, session=session)

    assert c.transactions.repo is c.repo
    assert c.inventory.cash is c.cash
    assert c.reporting.low_stock_threshold == 10
    rows, has_next = c.transactions.list_page("sale")
    assert rows == [] and has_next is False
    assert session.requests[0]["params"] == {"page": 1, "limit": 5}


def test_json_formatter_emits_one_object_per_record():
    record = logging.LogRecord("smbdash.api", logging.WARNING, __file__, 1, "api_http_error status=%s", (400,), None)

    line = JsonFormatter().format(record)

    payload = json.loads(line)
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "smbdash.api"
    assert payload["message"] == "api_http_error status=400"


def test_app_paths_honour_home_override(tmp_path: Path):
    paths = get_app_paths(env={"SMBDASH_HOME": str(tmp_path / "data")})

    assert paths.base_dir == tmp_path / "data"
    assert paths.logs_dir == tmp_path / "data" / "logs"
    assert paths.exports_dir.is_dir()


def test_tuning_settings_from_environment_fall_back_when_invalid():
    settings = get_api_settings({
        "SMBDASH_PAGE_SIZE": "25",
        "SMBDASH_FETCH_LIMIT": "0",
        "SMBDASH_LOW_STOCK": "many",
    })
    assert settings.transactions_page_size == 25
    assert settings.dashboard_fetch_limit == 1000
    assert settings.low_stock_threshold == 10


def test_log_level_from_environment():
    assert get_log_level({"SMBDASH_LOG_LEVEL": "debug"}) == logging.DEBUG
    assert get_log_level({"SMBDASH_LOG_LEVEL": "chatty"}) == logging.INFO
    assert get_log_level({}) == logging.INFO


@pytest.fixture
def logs_dir(tmp_path: Path):
    root = logging.getLogger()
    level = root.level
    yield tmp_path / "logs"
    teardown_logging()
    root.setLevel(level)


def test_setup_logging_is_idempotent_and_writes_channel_files(logs_dir: Path):
    files = setup_logging(logs_dir)
    handlers = len(logging.getLogger().handlers)
    setup_logging(logs_dir)

    assert len(logging.getLogger().handlers) == handlers
    assert [f.name for f in files] == ["app.log", "errors.log", "api.log", "transactions.log"]

    logging.getLogger("smbdash.api").warning("api_http_error status=%s", 502)
    for h in logging.getLogger("smbdash.api").handlers + logging.getLogger().handlers:
        h.flush()

    api_line = json.loads((logs_dir / "api.log").read_text(encoding="utf-8").splitlines()[-1])
    assert api_line["message"] == "api_http_error status=502"
    assert "api_http_error" in (logs_dir / "app.log").read_text(encoding="utf-8")
    assert (logs_dir / "errors.log").read_text(encoding="utf-8") == ""
