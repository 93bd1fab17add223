"""Dashboard module: JSON and WebSocket API over the engine."""

from goldtrackr.dashboard.server import ConnectionHub, create_app, serve


__all__ = [
    "ConnectionHub",
    "create_app",
    "serve",
]
