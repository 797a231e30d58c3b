from __future__ import annotations

import logging

from smbdash.application.container import build_container
from smbdash.config import get_api_settings, get_app_paths, get_log_level
from smbdash.logging_config import setup_logging, teardown_logging
from smbdash.ui.app import App

log = logging.getLogger(__name__)


def main() -> None:
    paths = get_app_paths()
    setup_logging(paths.logs_dir, level=get_log_level())

    settings = get_api_settings()
    container = build_container(settings)
    log.info("app_start api=%s timeout=%s", settings.base_url, settings.timeout)

    try:
        app = App(
            container=container,
            api_url=settings.base_url,
            logs_dir=str(paths.logs_dir),
            exports_dir=str(paths.exports_dir),
        )
        app.mainloop()
    finally:
        log.info("app_stop")
        teardown_logging()


if __name__ == "__main__":
    main()
