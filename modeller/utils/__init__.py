"""
Utilities package for modeller.

Exports shared helpers for logging and other cross-cutting concerns.
Keep this package lightweight and free of model-specific logic.
"""

from modeller.utils.logging import JsonFormatter, configure_logging, get_logger

__all__ = [
    "JsonFormatter",
    "configure_logging",
    "get_logger",
]
