"""blogdesk - Flask blog with an admin panel and email subscriptions."""

from . import blueprints
from .server import create_app, get_app, run_server

__all__ = ['blueprints', 'create_app', 'get_app', 'run_server']
