"""Serve a gateway with pounce.

Pounce's ``run()`` takes an import string (e.g., ``"myapp:gateway"``),
but perch has a live ``Gateway`` object, so ``pounce.Server`` is used
directly with the ASGI callable.
"""


def run_server(
    gateway: object,
    host: str,
    port: int,
    *,
    workers: int = 1,
    reload: bool = False,
    app_path: str | None = None,
) -> None:
    """Start a pounce server for the given gateway.

    Args:
        gateway: ASGI callable (perch Gateway instance).
        host: Bind host address.
        port: Bind port number.
        workers: Worker count (each worker runs its own event loop).
        reload: Enable auto-reload on file changes.
        app_path: Optional ``"module:attribute"`` import string.  When
            provided, pounce reimports the gateway on each reload cycle.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=workers,
        reload=reload,
    )
    server = Server(config, gateway, app_path=app_path)
    server.run()
