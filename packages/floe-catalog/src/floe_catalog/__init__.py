"""floe-catalog: Iceberg catalog abstraction for floe-runtime.

This package provides one Catalog contract over several PyIceberg backends:
- REST (Polaris, Nessie, ...), Hive metastore, AWS Glue, DynamoDB and SQL
- Composable connection and table-creation options
- Backend-independent error kinds
- Namespace properties reconciliation
- Structured logging via structlog and OpenTelemetry span tracing

Example:
    >>> from floe_catalog import create_catalog
    >>> from floe_catalog.options import with_credential, with_uri
    >>> catalog = create_catalog(
    ...     "rest",
    ...     "polaris",
    ...     with_uri("http://localhost:8181/api/catalog"),
    ...     with_credential("client_id:client_secret"),
    ... )
    >>> catalog.create_namespace_if_not_exists(("bronze",))
    >>> catalog.list_tables(("bronze",))
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    # Factory functions
    "create_catalog",
    "create_catalog_from_properties",
    "register_catalog",
    "registered_catalog_types",
    # Catalogs
    "Catalog",
    "RestCatalog",
    "HiveCatalog",
    "GlueCatalog",
    "DynamoDbCatalog",
    "SqlCatalog",
    # Configuration models
    "CatalogType",
    "ConnectionConfig",
    "CreateTableConfig",
    "TLSConfig",
    "AwsConfig",
    # Logging
    "configure_logging",
    # Context
    "OperationContext",
    # Properties
    "PropertiesUpdateSummary",
    "reconcile_properties",
    # Exceptions
    "ErrorKind",
    "FloeCatalogError",
    "NoSuchTableError",
    "NoSuchNamespaceError",
    "NamespaceAlreadyExistsError",
    "TableAlreadyExistsError",
    "CatalogNotFoundError",
    "NamespaceNotEmptyError",
    "PropertiesConflictError",
    "InvalidIdentifierError",
    "InvalidOptionError",
    "CommitFailedError",
    "OperationCancelledError",
    "CatalogOperationError",
    "CatalogConnectionError",
    "CatalogAuthenticationError",
]

_FACTORY = (
    "create_catalog",
    "create_catalog_from_properties",
    "register_catalog",
    "registered_catalog_types",
)
_ERRORS = frozenset(name for name in __all__ if name.endswith("Error") or name == "ErrorKind")
_CATALOGS = ("Catalog", "RestCatalog", "HiveCatalog", "GlueCatalog", "DynamoDbCatalog", "SqlCatalog")
_CONFIG = ("CatalogType", "ConnectionConfig", "CreateTableConfig", "TLSConfig", "AwsConfig")


def __getattr__(name: str) -> object:
    """Lazy import of public API members."""
    if name in _FACTORY:
        from floe_catalog import factory as factory_module

        return getattr(factory_module, name)
    if name in _CATALOGS:
        from floe_catalog import catalogs as catalogs_module

        return getattr(catalogs_module, name)
    if name in _CONFIG:
        from floe_catalog import config as config_module

        return getattr(config_module, name)
    if name == "configure_logging":
        from floe_catalog.observability import configure_logging

        return configure_logging
    if name == "OperationContext":
        from floe_catalog.context import OperationContext

        return OperationContext
    if name in ("PropertiesUpdateSummary", "reconcile_properties"):
        from floe_catalog import properties as properties_module

        return getattr(properties_module, name)
    if name in _ERRORS:
        from floe_catalog import errors as errors_module

        return getattr(errors_module, name)
    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
