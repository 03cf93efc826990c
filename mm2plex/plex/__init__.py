from __future__ import annotations

from .client import (
    PLEXAuthError,
    PLEXConfig,
    PLEXError,
    PLEXNotFound,
    PlexLibraryClient,
    connect,
)

__all__ = ["PLEXAuthError", "PLEXConfig", "PLEXError", "PLEXNotFound", "PlexLibraryClient", "connect"]
