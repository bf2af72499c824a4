# src/unseal_stage/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .messages import router as messages_router
from .partners import router as partners_router

__all__ = [
    "messages_router",
    "partners_router",
]
