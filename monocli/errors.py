"""
monocli Error Hierarchy

Base error and specific error types for all monocli components.
Errors carry metadata for structured logging.
"""

from typing import Any, Dict, Optional


class MonoCliError(RuntimeError):
    """
    Base error for monocli components. Carries metadata for structured logging.

    Attributes:
        category: Error category for classification (e.g., "validation", "filesystem")
        retryable: Whether the operation can be retried
        metadata: Additional context for logging and debugging
    """

    category: str = "runtime"
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        metadata: Optional[Dict[str, Any]] = None,
        retryable: Optional[bool] = None,
    ) -> None:
        super().__init__(message)
        self.metadata = metadata or {}
        if retryable is not None:
            self.retryable = retryable


class NotFoundError(MonoCliError):
    """Raised when the monorepo root or a required document is absent."""

    category = "not_found"


class ValidationError(MonoCliError):
    """Raised when user input or configuration fails validation."""

    category = "validation"


# Filesystem Errors
class FilesystemError(MonoCliError):
    """Raised when reading, writing or walking the filesystem fails."""

    category = "filesystem"


# Document Errors
class DocumentError(MonoCliError):
    """Base class for structured document errors."""

    category = "document"


class DecodeError(DocumentError):
    """Raised when a document is malformed or has an unexpected shape."""

    category = "decode"


class EncodeError(DocumentError):
    """Raised when a document cannot be serialized."""

    category = "encode"


# Execution Errors
class ExecutionError(MonoCliError):
    """Raised when a script or toolchain command fails or cannot start."""

    category = "execution"
