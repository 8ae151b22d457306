"""Gateway configuration.

GatewayConfig is a frozen dataclass: immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GatewayConfig:
    """Gateway configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = GatewayConfig(port=9000, upstream_timeout=5.0)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False
    workers: int = 1

    # Upstream forwarding
    upstream_timeout: float = 30.0
    connect_timeout: float = 5.0
    max_connections: int = 100
    forwarded_headers: bool = True  # X-Forwarded-For / -Proto / -Host

    # Logging
    log_level: str = "info"
