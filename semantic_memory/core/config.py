"""
Runtime configuration for the semantic memory server.
Values come from the environment; getters re-read it so tests can override.
"""

import os
from pathlib import Path

# Database path configuration
DB_PATH = os.getenv("MEMORY_DB_PATH", "./data/memory.db")

# Embedding provider configuration
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "sentence-transformers")  # sentence-transformers|hash
EMBED_MODEL_NAME = os.getenv("EMBED_MODEL_NAME", "all-MiniLM-L6-v2")
EMBED_DIMENSION = int(os.getenv("EMBED_DIMENSION", "384"))

# Search defaults, mirrored in the tool input schemas
SEARCH_DEFAULT_LIMIT = int(os.getenv("SEARCH_DEFAULT_LIMIT", "5"))
SEARCH_DEFAULT_THRESHOLD = float(os.getenv("SEARCH_DEFAULT_THRESHOLD", "0.3"))
MAX_SEARCH_RESULTS = int(os.getenv("MAX_SEARCH_RESULTS", "100"))

# Listing preview budget (characters)
PREVIEW_CHARS = 100

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Local HTTP surface
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8765"))

SERVER_NAME = "semantic-memory-server"
VERSION = "1.0.0"

VALID_EMBED_PROVIDERS = ["sentence-transformers", "hash"]


def get_db_path() -> str:
    """Get the configured database path."""
    return os.getenv("MEMORY_DB_PATH", DB_PATH)


def get_embed_provider_name() -> str:
    return os.getenv("EMBED_PROVIDER", EMBED_PROVIDER).lower()


def debug_enabled() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def get_embed_dimension() -> int:
    """Dimension for the hash provider. Raises ValueError on a non-integer value."""
    return int(os.getenv("EMBED_DIMENSION", str(EMBED_DIMENSION)))


def ensure_db_directory(db_path: str) -> None:
    """Ensure the database directory exists."""
    if db_path == ":memory:":
        return
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)


def get_embedding_provider():
    """Get the configured embedding provider implementation."""
    provider = get_embed_provider_name()

    if provider == "hash":
        from ..vector.embeddings import DeterministicHashEmbedding
        return DeterministicHashEmbedding(dimension=get_embed_dimension())

    from ..vector.embeddings import SentenceTransformerEmbedding
    return SentenceTransformerEmbedding(os.getenv("EMBED_MODEL_NAME", EMBED_MODEL_NAME))


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    if get_embed_provider_name() not in VALID_EMBED_PROVIDERS:
        issues.append(f"Invalid EMBED_PROVIDER: {get_embed_provider_name()}")

    try:
        if get_embed_dimension() < 1:
            issues.append("EMBED_DIMENSION must be >= 1")
    except ValueError:
        issues.append(f"Invalid EMBED_DIMENSION: {os.getenv('EMBED_DIMENSION')}")

    if SEARCH_DEFAULT_LIMIT < 1:
        issues.append("SEARCH_DEFAULT_LIMIT must be >= 1")

    if not 0.0 <= SEARCH_DEFAULT_THRESHOLD <= 1.0:
        issues.append("SEARCH_DEFAULT_THRESHOLD must be between 0 and 1")

    if MAX_SEARCH_RESULTS < SEARCH_DEFAULT_LIMIT:
        issues.append("MAX_SEARCH_RESULTS must be >= SEARCH_DEFAULT_LIMIT")

    if not 0 < API_PORT < 65536:
        issues.append(f"Invalid API_PORT: {API_PORT}")

    return issues
