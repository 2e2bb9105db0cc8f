"""
Semantic memory server: embedded free-text memories with cosine-similarity
search, plus a singleton user biography, stored in SQLite.
"""

from .core.config import VERSION as __version__

__all__ = ["__version__"]
