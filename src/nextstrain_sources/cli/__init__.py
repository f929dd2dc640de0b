"""CLI for nextstrain_sources."""

# Import commands to register them with the app
# These imports have side effects (registering commands with @app.command())
from nextstrain_sources.cli.commands import list as _list_module  # noqa: F401
from nextstrain_sources.cli.main import app, main


__all__ = ["app", "main"]
