"""Development server.

Serves a live perch App with pounce. pounce is an optional dependency
(``pip install 'perch[server]'``) and is only imported here.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from perch.errors import ConfigurationError

if TYPE_CHECKING:
    from perch.app import App

logger = logging.getLogger("perch.server")


def run_dev_server(
    app: App,
    host: str,
    port: int,
    *,
    reload: bool = False,
    reload_dirs: tuple[str, ...] = (),
    workers: int = 1,
    log_level: str = "info",
    app_path: str | None = None,
) -> None:
    """Serve *app* on *host*:*port* until interrupted.

    Reload runs a single worker. With *app_path* (``"module:attribute"``)
    pounce re-imports the app on every reload cycle; without it the live
    object is served and code changes need a restart.

    Raises:
        ConfigurationError: If pounce is not installed.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError as exc:
        msg = "Serving requires pounce. Install it with: pip install 'perch[server]'"
        raise ConfigurationError(msg) from exc

    if reload and app_path is None:
        logger.warning("Reload without an import string serves the app loaded at startup")

    config = ServerConfig(
        host=host,
        port=port,
        workers=1 if reload else workers,
        reload=reload,
        reload_dirs=reload_dirs,
        log_level=log_level,
    )
    logger.info("Serving %d routes on http://%s:%d", len(app.router.routes), host, port)
    Server(config, app, app_path=app_path).run()
