"""Application configuration.

One frozen dataclass per app. Values are read by ``App.run()``, by the
``strata run`` command (where CLI flags take precedence), and by the
terminal error handler (``debug``).
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Settings for serving an app. Immutable after creation.

    Example::

        app = App(config=AppConfig(debug=True, port=3000))

    ``debug`` does two things: unconsumed errors answer with their repr
    and traceback instead of a bare 500 body, and the server reloads on
    code changes.
    """

    # Bind address
    host: str = "127.0.0.1"
    port: int = 8000

    # Worker processes; reload mode always runs one
    workers: int = 1

    debug: bool = False

    # Watched for reload in addition to the working directory
    reload_dirs: tuple[str, ...] = ()
