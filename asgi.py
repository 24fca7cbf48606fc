"""
asgi.py -- ASGI entry point for Messagely.

Run with:  uvicorn asgi:app --reload

Configuration comes from the environment (see core/config.py). At minimum set
SECRET_KEY, or DEBUG=true for a throwaway development key.
"""

from api.main import app

__all__ = ["app"]
