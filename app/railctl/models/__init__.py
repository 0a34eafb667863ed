"""Data models for railctl.

This module exports the core data structures used throughout the application.
"""

from railctl.models.package import (
    NodeClient,
    PackageAction,
    PackageChange,
    PackageResult,
    package_actions,
)
from railctl.models.result import (
    ErrorKind,
    FileAction,
    FileActionType,
    ReconcileError,
    ReconcileResult,
    ReconcileWarning,
)

__all__ = [
    "ErrorKind",
    "FileAction",
    "FileActionType",
    "NodeClient",
    "PackageAction",
    "PackageChange",
    "PackageResult",
    "ReconcileError",
    "ReconcileResult",
    "ReconcileWarning",
    "package_actions",
]
