# /mm2plex/__init__.py
# mm2plex - mark Plex movies and episodes watched/unwatched from a My Movies collection.
from __future__ import annotations

__VERSION__ = "1.0.0"
__version__ = __VERSION__
