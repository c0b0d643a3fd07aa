"""Serving with pounce.

Pounce's ``run()`` takes an import string, but perch has a live ``App``
object, so ``pounce.Server`` is driven directly with the ASGI callable.
Pounce is an optional dependency (``pip install perch[server]``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from perch.errors import ConfigurationError

if TYPE_CHECKING:
    from perch.app import App


def run_server(
    app: App,
    host: str,
    port: int,
    *,
    app_path: str | None = None,
) -> None:
    """Start a pounce server for *app* and block until it stops.

    Args:
        app: The root perch App.
        host: Bind host address.
        port: Bind port number.
        app_path: Optional ``"module:attribute"`` import string. With
            ``debug=True`` pounce reimports it on each reload cycle.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError as exc:
        msg = (
            "Serving requires the 'bengal-pounce' package. "
            "Install it with: pip install perch[server]"
        )
        raise ConfigurationError(msg) from exc

    config = app.config
    server_config = ServerConfig(
        host=host,
        port=port,
        workers=1 if config.debug else config.workers,
        reload=config.debug,
        reload_include=config.reload_include,
        reload_dirs=config.reload_dirs,
        log_level=config.log_level,
    )
    Server(server_config, app, app_path=app_path).run()
