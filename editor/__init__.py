"""
editor — Editing surface for stop-sign policies
===============================================

Modules
-------
api
    :func:`create_app` FastAPI factory used by ``main.py serve``.
"""

from .api import create_app

__all__ = ["create_app"]
