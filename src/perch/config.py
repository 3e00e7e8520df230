"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3000, strict_slashes=True)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False
    workers: int = 1

    # Reload (development mode, requires debug=True)
    reload_dirs: tuple[str, ...] = ()

    # Routing
    case_sensitive: bool = False  # "/Foo" and "/foo" are different routes
    strict_slashes: bool = False  # "/foo" and "/foo/" are different routes
    regex_timeout: float | None = 0.05  # seconds per pattern match, None = unlimited

    # Logging
    log_level: str = "info"
