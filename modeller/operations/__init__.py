"""
Operations package for modeller.

Re-exports the operation slot interfaces and the override registry so callers
can import them from `modeller.operations` directly.
"""

from modeller.operations.abstract import (
    DeleteWhereOperation,
    GetOneOperation,
    GetOperation,
    InsertOperation,
    UpdateOperation,
)
from modeller.operations.overrides import OverrideRegistry

__all__ = [
    # Slot interfaces
    "DeleteWhereOperation",
    "GetOneOperation",
    "GetOperation",
    "InsertOperation",
    "UpdateOperation",
    # Registry
    "OverrideRegistry",
]
