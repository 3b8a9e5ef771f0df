"""Shared implementation of the Catalog contract over PyIceberg clients.

Each backend (REST, Hive, Glue, DynamoDB, SQL) subclasses
IcebergBackedCatalog and only provides the PyIceberg client constructor.
Identifier handling, error translation, cancellation, observability and
namespace properties reconciliation live here, so they behave the same for
every backend.
"""

from __future__ import annotations

import threading
from abc import abstractmethod
from collections.abc import Iterable, Iterator, Mapping
from contextlib import AbstractContextManager, contextmanager
from typing import TYPE_CHECKING, Any, ClassVar

from pyiceberg.exceptions import CommitFailedException as PyIcebergCommitFailedError
from pyiceberg.exceptions import (
    NamespaceAlreadyExistsError as PyIcebergNamespaceExistsError,
)
from pyiceberg.exceptions import (
    NamespaceNotEmptyError as PyIcebergNamespaceNotEmptyError,
)
from pyiceberg.exceptions import (
    NoSuchNamespaceError as PyIcebergNamespaceNotFoundError,
)
from pyiceberg.exceptions import (
    NoSuchTableError as PyIcebergTableNotFoundError,
)
from pyiceberg.exceptions import (
    TableAlreadyExistsError as PyIcebergTableExistsError,
)
from pyiceberg.io import load_file_io
from pyiceberg.table import Table

from floe_catalog import identifiers
from floe_catalog.catalogs.base import Catalog
from floe_catalog.context import run_in_context
from floe_catalog.errors import (
    CatalogAuthenticationError,
    CatalogConnectionError,
    CatalogOperationError,
    CommitFailedError,
    FloeCatalogError,
    InvalidIdentifierError,
    NamespaceAlreadyExistsError,
    NamespaceNotEmptyError,
    NoSuchNamespaceError,
    NoSuchTableError,
    TableAlreadyExistsError,
)
from floe_catalog.identifiers import (
    Identifier,
    IdentifierLike,
    identifier_to_string,
    namespace_from_identifier,
    to_identifier,
)
from floe_catalog.observability import catalog_operation, get_logger, get_tracer
from floe_catalog.options import build_connection_config, build_create_table_config
from floe_catalog.properties import Properties, PropertiesUpdateSummary, reconcile_properties

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer
    from pyiceberg.catalog import Catalog as PyIcebergCatalog
    from pyiceberg.schema import Schema
    from pyiceberg.table.metadata import TableMetadata
    from pyiceberg.table.update import TableRequirement, TableUpdate
    from structlog.stdlib import BoundLogger

    from floe_catalog.config import CatalogType
    from floe_catalog.context import OperationContext
    from floe_catalog.options import ConnectionOption, CreateTableOption


class IcebergBackedCatalog(Catalog):
    """Catalog implementation delegating to a PyIceberg catalog client.

    Subclasses set CATALOG_TYPE and implement _create_client(). The client is
    either injected (``client=``) or built from the connection options at
    construction time.

    Attributes:
        name: Catalog instance name.
        config: Immutable connection configuration built from the options.
    """

    CATALOG_TYPE: ClassVar[CatalogType]

    def __init__(
        self,
        name: str,
        *options: ConnectionOption,
        client: PyIcebergCatalog | None = None,
        tracer: Tracer | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        """Initialize the catalog.

        Args:
            name: Catalog instance name.
            *options: Connection options, applied in order.
            client: Optional pre-built PyIceberg catalog client.
            tracer: Optional OpenTelemetry tracer. Uses default if not provided.
            logger: Optional structlog logger. Uses default if not provided.

        Raises:
            InvalidOptionError: If an option does not apply to this backend.
            CatalogConnectionError: If the client cannot be constructed.
            CatalogAuthenticationError: If the backend rejects the credentials.
        """
        self.name = name
        self.config = build_connection_config(self.CATALOG_TYPE, options)
        self._tracer = tracer or get_tracer()
        self._logger = logger or get_logger()
        self._lock = threading.Lock()
        self._client: PyIcebergCatalog | None = client

        if self._client is None:
            self._validate_config()
            self._connect()

    @property
    def catalog_type(self) -> CatalogType:
        return self.CATALOG_TYPE

    def _validate_config(self) -> None:
        """Check backend-specific required settings before connecting."""

    @abstractmethod
    def _create_client(self, properties: dict[str, Any]) -> PyIcebergCatalog:
        """Construct the PyIceberg client for this backend."""

    def _connect(self) -> None:
        """Construct the backend client from the connection configuration.

        Raises:
            CatalogConnectionError: If construction fails.
            CatalogAuthenticationError: If authentication fails.
        """
        with self._operation("connect"):
            try:
                properties = self.config.to_catalog_properties(self.catalog_type)
                self._client = self._create_client(properties)
                self._logger.info(
                    "catalog_connected",
                    catalog_type=self.catalog_type.value,
                    name=self.name,
                )
            except Exception as exc:
                self._handle_connection_error(exc)

    def _handle_connection_error(self, exc: Exception) -> None:
        """Convert client construction failures to floe-catalog exceptions."""
        error_msg = str(exc).lower()

        if "401" in error_msg or "unauthorized" in error_msg or "authentication" in error_msg:
            self._logger.error(
                "catalog_authentication_failed",
                catalog_type=self.catalog_type.value,
                error=str(exc),
            )
            raise CatalogAuthenticationError(f"Authentication failed: {exc}") from exc

        self._logger.error(
            "catalog_connection_failed",
            catalog_type=self.catalog_type.value,
            error=str(exc),
        )
        raise CatalogConnectionError(
            "Failed to connect to catalog",
            catalog_type=self.catalog_type.value,
            cause=str(exc),
        ) from exc

    def _ensure_connected(self) -> PyIcebergCatalog:
        with self._lock:
            if self._client is None:
                self._connect()
            if self._client is None:
                raise CatalogConnectionError(
                    "Catalog connection not established",
                    catalog_type=self.catalog_type.value,
                )
            return self._client

    @property
    def inner_catalog(self) -> PyIcebergCatalog:
        """Access the underlying PyIceberg catalog client."""
        return self._ensure_connected()

    def is_connected(self) -> bool:
        """Return True if the backend client has been constructed."""
        return self._client is not None

    def reconnect(self) -> None:
        """Rebuild the backend client from the connection configuration."""
        with self._lock:
            self._client = None
            self._connect()

    def _operation(
        self,
        operation: str,
        *,
        namespace: str | None = None,
        table: str | None = None,
    ) -> AbstractContextManager[Span]:
        """Open a catalog_operation span on this catalog's tracer and logger."""
        return catalog_operation(
            operation,
            catalog_type=self.catalog_type.value,
            catalog_name=self.name,
            namespace=namespace,
            table=table,
            tracer=self._tracer,
            logger=self._logger,
        )

    @contextmanager
    def _backend_errors(
        self,
        operation: str,
        *,
        table: str | None = None,
        namespace: str | None = None,
        target: str | None = None,
    ) -> Iterator[None]:
        """Translate PyIceberg exceptions into floe-catalog exceptions.

        Args:
            operation: Operation name for the transport error context.
            table: Table involved, reported by NoSuchTableError.
            namespace: Namespace involved, reported by namespace errors.
            target: Table reported by TableAlreadyExistsError, defaults to ``table``.
        """
        try:
            yield
        except FloeCatalogError:
            raise
        except PyIcebergTableNotFoundError as exc:
            raise NoSuchTableError(table or "") from exc
        except PyIcebergTableExistsError as exc:
            raise TableAlreadyExistsError(target or table or "") from exc
        except PyIcebergNamespaceNotFoundError as exc:
            raise NoSuchNamespaceError(namespace or "") from exc
        except PyIcebergNamespaceExistsError as exc:
            raise NamespaceAlreadyExistsError(namespace or "") from exc
        except PyIcebergNamespaceNotEmptyError as exc:
            raise NamespaceNotEmptyError(namespace or "") from exc
        except PyIcebergCommitFailedError as exc:
            raise CommitFailedError(table or "", f"Commit failed: {exc}") from exc
        except Exception as exc:
            raise CatalogOperationError(
                operation,
                identifier=table or namespace,
                cause=str(exc),
            ) from exc

    def _require_namespace(
        self,
        client: PyIcebergCatalog,
        namespace: Identifier,
        context: OperationContext | None,
    ) -> None:
        """Raise NoSuchNamespaceError unless the namespace exists.

        Must be called inside _backend_errors so the PyIceberg error is translated.
        """
        if not namespace:
            raise NoSuchNamespaceError("", "The root namespace cannot hold tables")
        run_in_context(context, "load_namespace_properties", client.load_namespace_properties, namespace)

    # ==================== Table Operations ====================

    def create_table(
        self,
        identifier: IdentifierLike,
        schema: Schema,
        *options: CreateTableOption,
        context: OperationContext | None = None,
    ) -> Table:
        ident = to_identifier(identifier)
        table_str = identifier_to_string(ident)
        namespace = namespace_from_identifier(ident)
        ns_str = identifier_to_string(namespace)
        table_config = build_create_table_config(options)

        with (
            self._operation(
                "create_table",
                namespace=ns_str,
                table=table_str,
            ),
            self._backend_errors("create_table", table=table_str, namespace=ns_str),
        ):
            client = self._ensure_connected()
            self._require_namespace(client, namespace, context)

            kwargs: dict[str, Any] = {
                "identifier": ident,
                "schema": schema,
                "properties": table_config.properties,
            }
            if table_config.location:
                kwargs["location"] = table_config.location
            if table_config.partition_spec is not None:
                kwargs["partition_spec"] = table_config.partition_spec
            if table_config.sort_order is not None:
                kwargs["sort_order"] = table_config.sort_order

            table = run_in_context(context, "create_table", client.create_table, **kwargs)
            self._logger.info("table_created", table=table_str, location=table_config.location)
            return table

    def commit_table(
        self,
        table: Table,
        requirements: Iterable[TableRequirement],
        updates: Iterable[TableUpdate],
        *,
        context: OperationContext | None = None,
    ) -> tuple[TableMetadata, str]:
        ident = to_identifier(table.name())
        table_str = identifier_to_string(ident)
        requirements = tuple(requirements)
        updates = tuple(updates)

        with (
            self._operation(
                "commit_table",
                table=table_str,
            ),
            self._backend_errors("commit_table", table=table_str),
        ):
            client = self._ensure_connected()
            response = run_in_context(
                context,
                "commit_table",
                client.commit_table,
                table,
                requirements,
                updates,
            )
            self._logger.info(
                "table_committed",
                table=table_str,
                requirements=len(requirements),
                updates=len(updates),
                metadata_location=response.metadata_location,
            )
            return response.metadata, response.metadata_location

    def list_tables(
        self,
        namespace: IdentifierLike,
        *,
        context: OperationContext | None = None,
    ) -> list[Identifier]:
        ns_tuple = to_identifier(namespace)
        ns_str = identifier_to_string(ns_tuple)

        with (
            self._operation(
                "list_tables",
                namespace=ns_str,
            ),
            self._backend_errors("list_tables", namespace=ns_str),
        ):
            client = self._ensure_connected()
            self._require_namespace(client, ns_tuple, context)
            tables = run_in_context(context, "list_tables", client.list_tables, ns_tuple)
            result = [to_identifier(t) for t in tables]
            self._logger.debug("tables_listed", namespace=ns_str, count=len(result))
            return result

    def load_table(
        self,
        identifier: IdentifierLike,
        properties: Mapping[str, str] | None = None,
        *,
        context: OperationContext | None = None,
    ) -> Table:
        ident = to_identifier(identifier)
        table_str = identifier_to_string(ident)

        with (
            self._operation(
                "load_table",
                table=table_str,
            ),
            self._backend_errors("load_table", table=table_str),
        ):
            client = self._ensure_connected()
            table = run_in_context(context, "load_table", client.load_table, ident)
            if properties:
                table = self._with_io_properties(table, properties)
            self._logger.debug("table_loaded", table=table_str)
            return table

    @staticmethod
    def _with_io_properties(table: Table, properties: Mapping[str, str]) -> Table:
        """Return the table with extra FileIO properties merged in."""
        io_properties = {**table.io.properties, **properties}
        return Table(
            identifier=table.name(),
            metadata=table.metadata,
            metadata_location=table.metadata_location,
            io=load_file_io(io_properties, table.metadata_location),
            catalog=table.catalog,
        )

    def drop_table(
        self,
        identifier: IdentifierLike,
        *,
        context: OperationContext | None = None,
    ) -> None:
        ident = to_identifier(identifier)
        table_str = identifier_to_string(ident)

        with (
            self._operation(
                "drop_table",
                table=table_str,
            ),
            self._backend_errors("drop_table", table=table_str),
        ):
            client = self._ensure_connected()
            run_in_context(context, "drop_table", client.drop_table, ident)
            self._logger.info("table_dropped", table=table_str)

    def rename_table(
        self,
        from_identifier: IdentifierLike,
        to_identifier: IdentifierLike,
        *,
        context: OperationContext | None = None,
    ) -> Table:
        source = identifiers.to_identifier(from_identifier)
        destination = identifiers.to_identifier(to_identifier)
        source_str = identifier_to_string(source)
        destination_str = identifier_to_string(destination)
        destination_ns = identifier_to_string(namespace_from_identifier(destination))

        with (
            self._operation(
                "rename_table",
                table=source_str,
            ),
            self._backend_errors(
                "rename_table",
                table=source_str,
                namespace=destination_ns,
                target=destination_str,
            ),
        ):
            client = self._ensure_connected()
            if run_in_context(context, "rename_table", client.table_exists, destination):
                raise TableAlreadyExistsError(destination_str)
            run_in_context(context, "rename_table", client.rename_table, source, destination)
            self._logger.info("table_renamed", source=source_str, destination=destination_str)

        return self.load_table(destination, context=context)

    # ==================== Namespace Operations ====================

    def list_namespaces(
        self,
        parent: IdentifierLike | None = None,
        *,
        context: OperationContext | None = None,
    ) -> list[Identifier]:
        parent_tuple = to_identifier(parent)
        parent_str = identifier_to_string(parent_tuple) or None

        with (
            self._operation(
                "list_namespaces",
                namespace=parent_str,
            ),
            self._backend_errors("list_namespaces", namespace=parent_str),
        ):
            client = self._ensure_connected()
            # PyIceberg expects an empty tuple for top-level namespaces
            namespaces = run_in_context(context, "list_namespaces", client.list_namespaces, parent_tuple)
            result = [to_identifier(ns) for ns in namespaces]
            self._logger.debug("namespaces_listed", parent=parent_str, count=len(result))
            return result

    def create_namespace(
        self,
        namespace: IdentifierLike,
        properties: Mapping[str, str] | None = None,
        *,
        context: OperationContext | None = None,
    ) -> None:
        ns_tuple = to_identifier(namespace)
        ns_str = identifier_to_string(ns_tuple)
        if not ns_tuple:
            raise InvalidIdentifierError("", "Cannot create the root namespace")
        props = dict(properties or {})

        with (
            self._operation(
                "create_namespace",
                namespace=ns_str,
            ),
            self._backend_errors("create_namespace", namespace=ns_str),
        ):
            client = self._ensure_connected()
            run_in_context(context, "create_namespace", client.create_namespace, ns_tuple, props)
            self._logger.info("namespace_created", namespace=ns_str, properties=props)

    def drop_namespace(
        self,
        namespace: IdentifierLike,
        *,
        context: OperationContext | None = None,
    ) -> None:
        ns_tuple = to_identifier(namespace)
        ns_str = identifier_to_string(ns_tuple)

        with (
            self._operation(
                "drop_namespace",
                namespace=ns_str,
            ),
            self._backend_errors("drop_namespace", namespace=ns_str),
        ):
            client = self._ensure_connected()
            run_in_context(context, "drop_namespace", client.drop_namespace, ns_tuple)
            self._logger.info("namespace_dropped", namespace=ns_str)

    def load_namespace_properties(
        self,
        namespace: IdentifierLike,
        *,
        context: OperationContext | None = None,
    ) -> Properties:
        ns_tuple = to_identifier(namespace)
        ns_str = identifier_to_string(ns_tuple)

        with (
            self._operation(
                "load_namespace_properties",
                namespace=ns_str,
            ),
            self._backend_errors("load_namespace_properties", namespace=ns_str),
        ):
            client = self._ensure_connected()
            props = run_in_context(
                context,
                "load_namespace_properties",
                client.load_namespace_properties,
                ns_tuple,
            )
            return dict(props)

    def update_namespace_properties(
        self,
        namespace: IdentifierLike,
        removals: Iterable[str] | None = None,
        updates: Mapping[str, str] | None = None,
        *,
        context: OperationContext | None = None,
    ) -> PropertiesUpdateSummary:
        ns_tuple = to_identifier(namespace)
        ns_str = identifier_to_string(ns_tuple)
        requested_removals = list(removals or [])
        requested_updates = dict(updates or {})

        with (
            self._operation(
                "update_namespace_properties",
                namespace=ns_str,
            ),
            self._backend_errors("update_namespace_properties", namespace=ns_str),
        ):
            client = self._ensure_connected()
            current = run_in_context(
                context,
                "update_namespace_properties",
                client.load_namespace_properties,
                ns_tuple,
            )
            new_properties, summary = reconcile_properties(
                current,
                requested_removals,
                requested_updates,
            )

            if summary.has_changes:
                run_in_context(
                    context,
                    "update_namespace_properties",
                    client.update_namespace_properties,
                    ns_tuple,
                    removals=set(summary.removed),
                    updates={key: new_properties[key] for key in summary.updated},
                )

            self._logger.info(
                "namespace_properties_updated",
                namespace=ns_str,
                removed=summary.removed,
                updated=summary.updated,
                missing=summary.missing,
            )
            return summary
