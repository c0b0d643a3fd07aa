"""Application configuration.

AppConfig is a frozen dataclass. Servers and the CLI read it; nothing
mutates it after the App is built.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3000)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    workers: int = 0  # 0 = let the server pick

    # Reload (development mode, requires debug=True)
    reload_include: tuple[str, ...] = ()  # Extra extensions to watch (e.g. ".toml")
    reload_dirs: tuple[str, ...] = ()  # Extra directories to watch alongside cwd

    # Mounting
    redirect_status: int = 303  # Status for bare-prefix -> trailing-slash redirects

    # Logging
    log_level: str = "info"
