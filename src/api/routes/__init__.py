"""FastAPI route modules.

Exports all route modules for inclusion in the main application.
"""

from src.api.routes import (
    accounts,
    analytics,
    business,
    chat,
    conversations,
    files,
    identities,
)

__all__ = [
    "accounts",
    "analytics",
    "business",
    "chat",
    "conversations",
    "files",
    "identities",
]
