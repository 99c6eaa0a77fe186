"""HTTP surface of Memesense (FastAPI)."""

from .app import create_app

__all__ = ["create_app"]
