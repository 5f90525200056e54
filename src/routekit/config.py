"""Server configuration.

Listener settings live in one frozen dataclass built in code. There is
no config file or environment-variable layer.
"""

from dataclasses import dataclass

from routekit.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Listener configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ServerConfig(port=3000, access_log=True)
    """

    # Listener
    host: str = "127.0.0.1"
    port: int = 8000
    backlog: int = 2048

    # Connections
    keep_alive_timeout: int = 5

    # Logging (uvicorn's own loggers; routekit never installs handlers)
    access_log: bool = False
    log_level: str = "info"

    @classmethod
    def from_address(cls, address: str, **overrides: object) -> "ServerConfig":
        """Build a config from a ``"host:port"`` address.

        An empty host (``":8000"``) binds all interfaces.
        """
        host, sep, port = address.rpartition(":")
        if not sep or not port.isdigit():
            msg = f"address must look like 'host:port', got {address!r}"
            raise ConfigurationError(msg)
        port_number = int(port)
        if port_number > 65535:
            msg = f"port out of range in address {address!r}"
            raise ConfigurationError(msg)
        host = host.strip("[]") or "0.0.0.0"
        return cls(host=host, port=port_number, **overrides)  # type: ignore[arg-type]
