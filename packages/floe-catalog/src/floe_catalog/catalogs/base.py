"""The Catalog contract shared by every backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from floe_catalog.errors import (
    NamespaceAlreadyExistsError,
    NoSuchNamespaceError,
    NoSuchTableError,
)
from floe_catalog.identifiers import Identifier, IdentifierLike

if TYPE_CHECKING:
    from pyiceberg.schema import Schema
    from pyiceberg.table import Table
    from pyiceberg.table.metadata import TableMetadata
    from pyiceberg.table.update import TableRequirement, TableUpdate

    from floe_catalog.config import CatalogType
    from floe_catalog.context import OperationContext
    from floe_catalog.options import CreateTableOption
    from floe_catalog.properties import Properties, PropertiesUpdateSummary


class Catalog(ABC):
    """Catalog for Iceberg table and namespace operations.

    Implementations exist for REST, Hive, Glue, DynamoDB and SQL backends.
    Callers only use this interface; errors are raised as floe_catalog.errors
    types regardless of backend.

    Every operation takes an optional keyword-only ``context``. When given,
    a cancelled context makes the operation raise OperationCancelledError
    instead of a backend error. If the backend call had already started,
    the error has ``outcome_unknown=True``: a create, drop, rename, commit or
    properties update may still have been applied, so re-read state before
    retrying.
    """

    name: str

    @property
    @abstractmethod
    def catalog_type(self) -> CatalogType:
        """Return the backend type of this catalog."""

    # ==================== Table Operations ====================

    @abstractmethod
    def create_table(
        self,
        identifier: IdentifierLike,
        schema: Schema,
        *options: CreateTableOption,
        context: OperationContext | None = None,
    ) -> Table:
        """Create a new table.

        Options can provide location, partition spec, sort order and
        custom properties.

        Raises:
            TableAlreadyExistsError: If the table already exists.
            NoSuchNamespaceError: If the parent namespace does not exist.
        """

    @abstractmethod
    def commit_table(
        self,
        table: Table,
        requirements: Iterable[TableRequirement],
        updates: Iterable[TableUpdate],
        *,
        context: OperationContext | None = None,
    ) -> tuple[TableMetadata, str]:
        """Commit metadata updates guarded by requirements.

        Returns:
            Tuple of (new metadata, new metadata location).

        Raises:
            CommitFailedError: If a requirement no longer holds. Nothing is applied.
            NoSuchTableError: If the table does not exist.
        """

    @abstractmethod
    def list_tables(
        self,
        namespace: IdentifierLike,
        *,
        context: OperationContext | None = None,
    ) -> list[Identifier]:
        """List table identifiers in a namespace.

        Raises:
            NoSuchNamespaceError: If the namespace does not exist.
        """

    @abstractmethod
    def load_table(
        self,
        identifier: IdentifierLike,
        properties: Mapping[str, str] | None = None,
        *,
        context: OperationContext | None = None,
    ) -> Table:
        """Load a table.

        Raises:
            NoSuchTableError: If the table does not exist.
        """

    @abstractmethod
    def drop_table(
        self,
        identifier: IdentifierLike,
        *,
        context: OperationContext | None = None,
    ) -> None:
        """Drop the catalog entry of a table. Data files are not touched.

        Raises:
            NoSuchTableError: If the table does not exist.
        """

    @abstractmethod
    def rename_table(
        self,
        from_identifier: IdentifierLike,
        to_identifier: IdentifierLike,
        *,
        context: OperationContext | None = None,
    ) -> Table:
        """Rename a table, then load and return it under its new identifier.

        Raises:
            NoSuchTableError: If the source table does not exist.
            TableAlreadyExistsError: If the destination already exists.
        """

    # ==================== Namespace Operations ====================

    @abstractmethod
    def list_namespaces(
        self,
        parent: IdentifierLike | None = None,
        *,
        context: OperationContext | None = None,
    ) -> list[Identifier]:
        """List namespaces under ``parent``, or top-level ones if it is empty."""

    @abstractmethod
    def create_namespace(
        self,
        namespace: IdentifierLike,
        properties: Mapping[str, str] | None = None,
        *,
        context: OperationContext | None = None,
    ) -> None:
        """Create a namespace.

        Raises:
            NamespaceAlreadyExistsError: If the namespace already exists.
        """

    @abstractmethod
    def drop_namespace(
        self,
        namespace: IdentifierLike,
        *,
        context: OperationContext | None = None,
    ) -> None:
        """Drop an empty namespace.

        Raises:
            NoSuchNamespaceError: If the namespace does not exist.
            NamespaceNotEmptyError: If the namespace still contains tables.
        """

    @abstractmethod
    def load_namespace_properties(
        self,
        namespace: IdentifierLike,
        *,
        context: OperationContext | None = None,
    ) -> Properties:
        """Return the current properties of a namespace.

        Raises:
            NoSuchNamespaceError: If the namespace does not exist.
        """

    @abstractmethod
    def update_namespace_properties(
        self,
        namespace: IdentifierLike,
        removals: Iterable[str] | None = None,
        updates: Mapping[str, str] | None = None,
        *,
        context: OperationContext | None = None,
    ) -> PropertiesUpdateSummary:
        """Remove and upsert namespace properties.

        Raises:
            NoSuchNamespaceError: If the namespace does not exist.
            PropertiesConflictError: If a key is in both removals and updates.
                Nothing is changed.
        """

    # ==================== Convenience Operations ====================

    def table_exists(
        self,
        identifier: IdentifierLike,
        *,
        context: OperationContext | None = None,
    ) -> bool:
        """Return True if the table exists."""
        try:
            self.load_table(identifier, context=context)
        except NoSuchTableError:
            return False
        return True

    def namespace_exists(
        self,
        namespace: IdentifierLike,
        *,
        context: OperationContext | None = None,
    ) -> bool:
        """Return True if the namespace exists."""
        try:
            self.load_namespace_properties(namespace, context=context)
        except NoSuchNamespaceError:
            return False
        return True

    def create_namespace_if_not_exists(
        self,
        namespace: IdentifierLike,
        properties: Mapping[str, str] | None = None,
        *,
        context: OperationContext | None = None,
    ) -> None:
        """Create a namespace unless it already exists (idempotent)."""
        try:
            self.create_namespace(namespace, properties, context=context)
        except NamespaceAlreadyExistsError:
            pass
