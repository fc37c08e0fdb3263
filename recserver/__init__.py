"""
Movie Night Recommender server: TMDB ingestion, embedding clients, catalog
stores, and the FastAPI recommendation API.

Use: python -m recserver.server
     python -m recserver.scripts.populate_catalog
"""

from .app import create_app
from .config import ServerConfig, configure_logging
from .state import AppState

__all__ = ["create_app", "ServerConfig", "configure_logging", "AppState"]
