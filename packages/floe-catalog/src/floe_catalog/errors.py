"""Custom exceptions for floe-catalog.

This module defines the exception hierarchy:
- FloeCatalogError (base)
- NoSuchTableError
- NoSuchNamespaceError
- NamespaceAlreadyExistsError
- TableAlreadyExistsError
- CatalogNotFoundError
- NamespaceNotEmptyError
- PropertiesConflictError
- InvalidIdentifierError
- InvalidOptionError
- CommitFailedError
- OperationCancelledError
- CatalogOperationError
- CatalogConnectionError
- CatalogAuthenticationError

Every exception carries an ErrorKind so callers can branch on ``error.kind``
instead of on backend-specific exception types.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of error kinds surfaced by every catalog backend."""

    NO_SUCH_TABLE = "no_such_table"
    NO_SUCH_NAMESPACE = "no_such_namespace"
    NAMESPACE_ALREADY_EXISTS = "namespace_already_exists"
    TABLE_ALREADY_EXISTS = "table_already_exists"
    CATALOG_NOT_FOUND = "catalog_not_found"
    NAMESPACE_NOT_EMPTY = "namespace_not_empty"
    PROPERTIES_CONFLICT = "properties_conflict"
    INVALID_IDENTIFIER = "invalid_identifier"
    INVALID_OPTION = "invalid_option"
    COMMIT_FAILED = "commit_failed"
    CANCELLED = "cancelled"
    TRANSPORT = "transport"


class FloeCatalogError(Exception):
    """Base exception for all floe-catalog operations.

    Attributes:
        message: Human-readable error description.
        details: Optional additional context about the error.
        kind: The ErrorKind of this exception class.

    Example:
        >>> try:
        ...     catalog.load_table(("bronze", "missing"))
        ... except FloeCatalogError as e:
        ...     if e.kind is ErrorKind.NO_SUCH_TABLE:
        ...         print("not there")
    """

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(self, message: str, *, details: dict[str, str] | None = None) -> None:
        """Initialize FloeCatalogError.

        Args:
            message: Human-readable error description.
            details: Optional additional context about the error.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation with details if present."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class NoSuchTableError(FloeCatalogError):
    """Table does not exist in the catalog.

    Example:
        >>> try:
        ...     catalog.drop_table(("bronze", "nonexistent"))
        ... except NoSuchTableError as e:
        ...     print(f"Table not found: {e.table}")
    """

    kind = ErrorKind.NO_SUCH_TABLE

    def __init__(self, table: str, message: str | None = None) -> None:
        """Initialize NoSuchTableError.

        Args:
            table: The table identifier that was not found.
            message: Optional custom error message.
        """
        msg = message or f"Table does not exist: {table}"
        super().__init__(msg, details={"table": table})
        self.table = table


class NoSuchNamespaceError(FloeCatalogError):
    """Namespace does not exist in the catalog."""

    kind = ErrorKind.NO_SUCH_NAMESPACE

    def __init__(self, namespace: str, message: str | None = None) -> None:
        """Initialize NoSuchNamespaceError.

        Args:
            namespace: The namespace that was not found.
            message: Optional custom error message.
        """
        msg = message or f"Namespace does not exist: {namespace}"
        super().__init__(msg, details={"namespace": namespace})
        self.namespace = namespace


class NamespaceAlreadyExistsError(FloeCatalogError):
    """Namespace already exists in the catalog.

    Raised when attempting to create a namespace that already exists
    (when not using the idempotent create_namespace_if_not_exists method).
    """

    kind = ErrorKind.NAMESPACE_ALREADY_EXISTS

    def __init__(self, namespace: str, message: str | None = None) -> None:
        """Initialize NamespaceAlreadyExistsError.

        Args:
            namespace: The namespace that already exists.
            message: Optional custom error message.
        """
        msg = message or f"Namespace already exists: {namespace}"
        super().__init__(msg, details={"namespace": namespace})
        self.namespace = namespace


class TableAlreadyExistsError(FloeCatalogError):
    """Table already exists in the catalog.

    Raised by create_table, and by rename_table when the destination is taken.
    """

    kind = ErrorKind.TABLE_ALREADY_EXISTS

    def __init__(self, table: str, message: str | None = None) -> None:
        """Initialize TableAlreadyExistsError.

        Args:
            table: The table identifier that already exists.
            message: Optional custom error message.
        """
        msg = message or f"Table already exists: {table}"
        super().__init__(msg, details={"table": table})
        self.table = table


class CatalogNotFoundError(FloeCatalogError):
    """Catalog type is not registered."""

    kind = ErrorKind.CATALOG_NOT_FOUND

    def __init__(self, catalog_type: str, message: str | None = None) -> None:
        msg = message or f"Catalog type not registered: {catalog_type}"
        super().__init__(msg, details={"catalog_type": catalog_type})
        self.catalog_type = catalog_type


class NamespaceNotEmptyError(FloeCatalogError):
    """Cannot drop a namespace that contains tables.

    Tables must be dropped first before the namespace can be removed.
    """

    kind = ErrorKind.NAMESPACE_NOT_EMPTY

    def __init__(self, namespace: str, message: str | None = None) -> None:
        """Initialize NamespaceNotEmptyError.

        Args:
            namespace: The namespace that is not empty.
            message: Optional custom error message.
        """
        msg = message or f"Namespace is not empty: {namespace}"
        super().__init__(msg, details={"namespace": namespace})
        self.namespace = namespace


class PropertiesConflictError(FloeCatalogError):
    """The same keys were requested for both removal and update.

    Attributes:
        keys: Every conflicting key, in the order they were requested for removal.

    Example:
        >>> try:
        ...     reconcile_properties({}, ["a"], {"a": "1"})
        ... except PropertiesConflictError as e:
        ...     e.keys
        ['a']
    """

    kind = ErrorKind.PROPERTIES_CONFLICT

    def __init__(self, keys: Iterable[str]) -> None:
        """Initialize PropertiesConflictError.

        Args:
            keys: The keys present in both removals and updates.
        """
        self.keys = list(keys)
        msg = f"Conflict between removals and updates for keys: {self.keys}"
        super().__init__(msg)


class InvalidIdentifierError(FloeCatalogError):
    """Identifier cannot be used for the requested operation."""

    kind = ErrorKind.INVALID_IDENTIFIER

    def __init__(self, identifier: str, message: str | None = None) -> None:
        msg = message or f"Invalid identifier: {identifier!r}"
        super().__init__(msg, details={"identifier": identifier})
        self.identifier = identifier


class InvalidOptionError(FloeCatalogError):
    """A connection option was passed to a backend that does not accept it.

    Raised at catalog construction time, never at call time.
    """

    kind = ErrorKind.INVALID_OPTION

    def __init__(self, option: str, catalog_type: str, message: str | None = None) -> None:
        """Initialize InvalidOptionError.

        Args:
            option: Name of the rejected option.
            catalog_type: The backend that rejected it.
            message: Optional custom error message.
        """
        msg = message or f"Option {option} is not supported by the {catalog_type} catalog"
        super().__init__(msg, details={"option": option, "catalog_type": catalog_type})
        self.option = option
        self.catalog_type = catalog_type


class CommitFailedError(FloeCatalogError):
    """A commit requirement no longer holds; nothing was applied."""

    kind = ErrorKind.COMMIT_FAILED

    def __init__(self, table: str, message: str | None = None) -> None:
        msg = message or f"Commit failed for table: {table}"
        super().__init__(msg, details={"table": table})
        self.table = table


class OperationCancelledError(FloeCatalogError):
    """The operation context was cancelled or its deadline passed.

    Backend clients are synchronous: a request already sent cannot be
    aborted, only abandoned. When that happens ``outcome_unknown`` is True
    and a mutating operation may still have been applied by the backend.
    Re-read catalog state (e.g. table_exists) before retrying.

    Attributes:
        operation: Name of the cancelled operation.
        outcome_unknown: True if the backend call was already running.
    """

    kind = ErrorKind.CANCELLED

    def __init__(
        self,
        operation: str | None = None,
        message: str | None = None,
        *,
        outcome_unknown: bool = False,
    ) -> None:
        """Initialize OperationCancelledError.

        Args:
            operation: Name of the operation that was cancelled.
            message: Optional custom error message.
            outcome_unknown: Whether the abandoned backend call may still complete.
        """
        if message:
            msg = message
        elif outcome_unknown:
            msg = "Operation cancelled while the backend call was running; outcome unknown"
        else:
            msg = "Operation cancelled"
        details: dict[str, str] = {}
        if operation:
            details["operation"] = operation
        if outcome_unknown:
            details["outcome_unknown"] = "true"
        super().__init__(msg, details=details)
        self.operation = operation
        self.outcome_unknown = outcome_unknown


class CatalogOperationError(FloeCatalogError):
    """A backend client failed for a reason not covered by the other errors.

    The original exception is chained as ``__cause__``.
    """

    kind = ErrorKind.TRANSPORT

    def __init__(
        self,
        operation: str,
        *,
        identifier: str | None = None,
        cause: str | None = None,
    ) -> None:
        """Initialize CatalogOperationError.

        Args:
            operation: The catalog operation that failed.
            identifier: Table or namespace involved, if any.
            cause: The underlying error message.
        """
        details: dict[str, str] = {"operation": operation}
        if identifier:
            details["identifier"] = identifier
        if cause:
            details["cause"] = cause
        super().__init__(f"Catalog operation failed: {operation}", details=details)
        self.operation = operation
        self.identifier = identifier
        self.cause = cause


class CatalogConnectionError(FloeCatalogError):
    """Failed to construct or connect the backend client.

    Raised when:
    - The catalog endpoint is unreachable or times out
    - The backend client rejects its configuration
    - SSL/TLS handshake fails
    """

    kind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str = "Failed to connect to catalog",
        *,
        catalog_type: str | None = None,
        cause: str | None = None,
    ) -> None:
        """Initialize CatalogConnectionError.

        Args:
            message: Human-readable error description.
            catalog_type: The backend that failed to connect.
            cause: The underlying cause of the connection failure.
        """
        details: dict[str, str] = {}
        if catalog_type:
            details["catalog_type"] = catalog_type
        if cause:
            details["cause"] = cause
        super().__init__(message, details=details)
        self.catalog_type = catalog_type
        self.cause = cause


class CatalogAuthenticationError(FloeCatalogError):
    """Authentication to the catalog failed.

    Security:
        Credentials and tokens are never included in the message or details.
    """

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, details={})
