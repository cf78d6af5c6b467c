"""Serve an App with pounce.

The app object is handed to ``pounce.Server`` directly. The import
string, when known, is passed along so reloads can reimport it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from strata.app import App

logger = logging.getLogger("strata.server")


def run_server(
    app: App,
    host: str,
    port: int,
    *,
    workers: int = 1,
    reload: bool = False,
    reload_dirs: tuple[str, ...] = (),
    app_path: str | None = None,
) -> None:
    """Run pounce with *app* until the server stops.

    Reload mode forces a single worker and watches the working directory
    plus *reload_dirs*. When *app_path* (``"module:attribute"``) is
    given, each reload reimports the app from it so edits take effect;
    without it the live object keeps serving.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=1 if reload else workers,
        reload=reload,
        reload_dirs=reload_dirs,
    )
    logger.info("Serving %d layer(s) on http://%s:%d", len(app.stack), host, port)
    server = Server(config, app, app_path=app_path)
    server.run()
