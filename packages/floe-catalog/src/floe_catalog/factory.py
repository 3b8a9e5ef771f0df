"""Catalog registry and factory.

This module maps catalog types to their implementations and provides:
- create_catalog(): build a catalog from a type and connection options
- create_catalog_from_properties(): build a catalog from a flat mapping
- register_catalog(): plug in an additional backend
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from floe_catalog.catalogs.dynamodb import DynamoDbCatalog
from floe_catalog.catalogs.glue import GlueCatalog
from floe_catalog.catalogs.hive import HiveCatalog
from floe_catalog.catalogs.rest import RestCatalog
from floe_catalog.catalogs.sql import SqlCatalog
from floe_catalog.config import CatalogType
from floe_catalog.errors import CatalogNotFoundError
from floe_catalog.observability import catalog_operation, get_logger
from floe_catalog.options import (
    ConnectionOption,
    with_auth_uri,
    with_catalog_properties,
    with_credential,
    with_metadata_location,
    with_oauth_token,
    with_prefix,
    with_uri,
    with_warehouse_location,
)

if TYPE_CHECKING:
    from pyiceberg.catalog import Catalog as PyIcebergCatalog

    from floe_catalog.catalogs.base import Catalog

CatalogFactory = Callable[..., "Catalog"]

PROPERTY_TYPE = "type"

_registry: dict[str, CatalogFactory] = {
    CatalogType.REST.value: RestCatalog,
    CatalogType.HIVE.value: HiveCatalog,
    CatalogType.GLUE.value: GlueCatalog,
    CatalogType.DYNAMODB.value: DynamoDbCatalog,
    CatalogType.SQL.value: SqlCatalog,
}

# Flat property keys understood by create_catalog_from_properties
_PROPERTY_OPTIONS: dict[str, Callable[[str], ConnectionOption]] = {
    "uri": with_uri,
    "warehouse": with_warehouse_location,
    "credential": with_credential,
    "token": with_oauth_token,
    "metadata_location": with_metadata_location,
    "oauth2-server-uri": with_auth_uri,
    "prefix": with_prefix,
}


def register_catalog(catalog_type: str | CatalogType, factory: CatalogFactory) -> None:
    """Register a catalog implementation for a type.

    Registering an existing type replaces its implementation.

    Args:
        catalog_type: Type name used to look the implementation up.
        factory: Callable ``factory(name, *options, client=None)`` returning a Catalog.
    """
    key = _type_key(catalog_type)
    _registry[key] = factory
    get_logger().debug("catalog_registered", catalog_type=key)


def registered_catalog_types() -> list[str]:
    """Return the registered catalog type names, sorted."""
    return sorted(_registry)


def create_catalog(
    catalog_type: str | CatalogType,
    name: str,
    *options: ConnectionOption,
    client: PyIcebergCatalog | None = None,
) -> Catalog:
    """Create a catalog of the given type.

    Args:
        catalog_type: Registered type name (rest, hive, glue, dynamodb, sql).
        name: Catalog instance name.
        *options: Connection options, applied in order.
        client: Optional pre-built PyIceberg client.

    Returns:
        Catalog: Configured catalog.

    Raises:
        CatalogNotFoundError: If no implementation is registered for the type.
        InvalidOptionError: If an option does not apply to the backend.
        CatalogConnectionError: If the backend client cannot be constructed.

    Example:
        >>> from floe_catalog import create_catalog
        >>> from floe_catalog.options import with_uri, with_warehouse_location
        >>> catalog = create_catalog(
        ...     "rest",
        ...     "polaris",
        ...     with_uri("http://localhost:8181/api/catalog"),
        ...     with_warehouse_location("my_warehouse"),
        ... )
    """
    key = _type_key(catalog_type)
    factory = _registry.get(key)
    if factory is None:
        raise CatalogNotFoundError(key)

    logger = get_logger()
    with catalog_operation("create_catalog", catalog_type=key, catalog_name=name):
        logger.info("creating_catalog", catalog_type=key, name=name, options=len(options))
        return factory(name, *options, client=client)


def create_catalog_from_properties(
    name: str,
    properties: Mapping[str, Any],
    *,
    client: PyIcebergCatalog | None = None,
) -> Catalog:
    """Create a catalog from a flat property mapping.

    The mapping must contain a ``type`` key. Well-known keys (uri, warehouse,
    credential, token, ...) become the matching connection option when the
    backend accepts it; every other key is passed through to the client as
    a catalog property, nested values such as ``ssl`` included unchanged.

    Example:
        >>> catalog = create_catalog_from_properties(
        ...     "local",
        ...     {"type": "sql", "uri": "sqlite:///catalog.db", "warehouse": "file:///tmp/wh"},
        ... )

    Raises:
        ValueError: If the mapping has no ``type`` key.
        CatalogNotFoundError: If the type is not registered.
    """
    remaining = dict(properties)
    raw_type = remaining.pop(PROPERTY_TYPE, None)
    if not raw_type:
        msg = f"Catalog properties for {name!r} must include a {PROPERTY_TYPE!r} key"
        raise ValueError(msg)

    key = _type_key(str(raw_type))
    options: list[ConnectionOption] = []
    try:
        catalog_type: CatalogType | None = CatalogType(key)
    except ValueError:
        catalog_type = None

    for property_key, make_option in _PROPERTY_OPTIONS.items():
        if property_key not in remaining:
            continue
        option = make_option(str(remaining[property_key]))
        if catalog_type is not None and option.accepts(catalog_type):
            options.append(option)
            del remaining[property_key]

    if remaining:
        options.append(with_catalog_properties(remaining))

    return create_catalog(key, name, *options, client=client)


def _type_key(catalog_type: str | CatalogType) -> str:
    if isinstance(catalog_type, CatalogType):
        return catalog_type.value
    return catalog_type.strip().lower()
