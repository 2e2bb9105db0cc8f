"""
Structured operation logging for the memory stores and tool surfaces.
All output goes to stderr; stdout belongs to the stdio transport.
"""

import logging
import sys
from typing import Any, Dict, Optional


def _truncate(value: str, limit: int = 50) -> str:
    return value[:limit] + "..." if len(value) > limit else value


class StructuredLogger:
    """Structured logger for memory, biography, search and tool operations."""

    def __init__(self, name: str = "semantic_memory", level: str = "INFO"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def set_level(self, level: str) -> None:
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    def log_operation(self, operation: str, status: str, details: Optional[Dict[str, Any]] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status in ("failed", "error"):
            self.logger.warning(message)
        else:
            self.logger.info(message)

    def log_memory_operation(self, operation: str, memory_id: str, text: Optional[str] = None, status: str = "success"):
        """Log a memory-table operation."""
        details: Dict[str, Any] = {"id": memory_id}
        if text is not None:
            details["text"] = _truncate(text)

        self.log_operation(f"memory.{operation}", status, details)

    def log_bio_operation(self, operation: str, fields=None, status: str = "success"):
        """Log a biography operation. Only field names are logged, never values."""
        details = {"fields": sorted(fields)} if fields else None
        self.log_operation(f"bio.{operation}", status, details)

    def log_search(self, query: str, candidates: int, returned: int, limit: int, min_score: float, duration_ms: float):
        """Log a similarity search."""
        self.log_operation("memory.search", "success", {
            "query": _truncate(query),
            "candidates": candidates,
            "returned": returned,
            "limit": limit,
            "min_score": min_score,
            "duration_ms": round(duration_ms, 2),
        })

    def log_tool_call(self, tool_name: str, success: bool, duration_ms: float, error: Optional[str] = None):
        """Log the outcome of a dispatched tool call."""
        details: Dict[str, Any] = {"tool": tool_name, "duration_ms": round(duration_ms, 2)}
        if error:
            details["error"] = _truncate(error, 100)
        self.log_operation("tool.call", "success" if success else "failed", details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)

    def exception(self, message: str) -> None:
        """Log an error message with the active traceback."""
        self.logger.exception(message)


# Global logger instance
logger = StructuredLogger()
