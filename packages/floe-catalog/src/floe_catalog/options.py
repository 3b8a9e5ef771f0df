"""Composable connection and table-creation options.

A configuration record is built by applying an ordered sequence of options to
a zero-valued record. Each option sets one field; when the same option is
given twice, the last one wins.

Connection options are tagged with the catalog types that accept them. A
backend validates the tags when it is constructed, so a REST-only option can
never reach a Glue catalog.

Example:
    >>> config = build_connection_config(
    ...     CatalogType.REST,
    ...     [with_uri("http://localhost:8181"), with_oauth_token("t0k3n")],
    ... )
    >>> config.uri
    'http://localhost:8181'
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import SecretStr
from pyiceberg.partitioning import PartitionSpec
from pyiceberg.table.sorting import SortOrder

from floe_catalog.config import (
    DEFAULT_SIGV4_SERVICE,
    AwsConfig,
    CatalogType,
    ConnectionConfig,
    CreateTableConfig,
    TLSConfig,
)
from floe_catalog.errors import InvalidOptionError

ALL_CATALOG_TYPES = frozenset(CatalogType)
REST_ONLY = frozenset({CatalogType.REST})
AWS_CATALOG_TYPES = frozenset({CatalogType.GLUE, CatalogType.DYNAMODB})
URI_CATALOG_TYPES = frozenset({CatalogType.REST, CatalogType.HIVE, CatalogType.SQL})


@dataclass(frozen=True)
class ConnectionOption:
    """A single connection option.

    Attributes:
        name: Option name, used in error messages.
        catalog_types: Backends that accept this option.
        apply: Function setting the option's field(s) on the pending record.
    """

    name: str
    catalog_types: frozenset[CatalogType]
    apply: Callable[[dict[str, Any]], None]

    def accepts(self, catalog_type: CatalogType) -> bool:
        """Return True if the option applies to the given backend."""
        return catalog_type in self.catalog_types


@dataclass(frozen=True)
class CreateTableOption:
    """A single table-creation option."""

    name: str
    apply: Callable[[dict[str, Any]], None]


def _set(field: str, value: Any) -> Callable[[dict[str, Any]], None]:
    def apply(fields: dict[str, Any]) -> None:
        fields[field] = value

    return apply


# ==================== Connection Options ====================


def with_uri(uri: str) -> ConnectionOption:
    """Set the catalog endpoint or connection URI."""
    return ConnectionOption("uri", URI_CATALOG_TYPES, _set("uri", uri))


def with_credential(credential: str) -> ConnectionOption:
    """Set the client credential used for OAuth2 token exchange.

    Args:
        credential: Credential string, usually ``client_id:client_secret``.
    """
    return ConnectionOption("credential", REST_ONLY, _set("credential", SecretStr(credential)))


def with_oauth_token(token: str) -> ConnectionOption:
    """Set a pre-obtained OAuth2 bearer token, bypassing token exchange."""
    return ConnectionOption("oauth_token", REST_ONLY, _set("oauth_token", SecretStr(token)))


def with_tls_config(tls: TLSConfig) -> ConnectionOption:
    """Override the transport's certificate configuration."""
    return ConnectionOption("tls", REST_ONLY, _set("tls", tls))


def with_warehouse_location(location: str) -> ConnectionOption:
    """Set the root storage location advertised to the backend."""
    return ConnectionOption(
        "warehouse_location",
        ALL_CATALOG_TYPES,
        _set("warehouse_location", location),
    )


def with_metadata_location(location: str) -> ConnectionOption:
    """Pin an explicit metadata file location."""
    return ConnectionOption("metadata_location", REST_ONLY, _set("metadata_location", location))


def with_sigv4() -> ConnectionOption:
    """Enable SigV4 request signing with the default service name."""

    def apply(fields: dict[str, Any]) -> None:
        fields["enable_sigv4"] = True
        fields["sigv4_service"] = DEFAULT_SIGV4_SERVICE

    return ConnectionOption("sigv4", REST_ONLY, apply)


def with_sigv4_region_service(region: str, service: str = "") -> ConnectionOption:
    """Enable SigV4 request signing for a region and service.

    Args:
        region: Signing region.
        service: Signing service; an empty string selects ``execute-api``.
    """

    def apply(fields: dict[str, Any]) -> None:
        fields["enable_sigv4"] = True
        fields["sigv4_region"] = region
        fields["sigv4_service"] = service or DEFAULT_SIGV4_SERVICE

    return ConnectionOption("sigv4", REST_ONLY, apply)


def with_auth_uri(uri: str) -> ConnectionOption:
    """Redirect token-exchange requests to an alternate endpoint."""
    return ConnectionOption("auth_uri", REST_ONLY, _set("auth_uri", uri))


def with_prefix(prefix: str) -> ConnectionOption:
    """Prepend a fixed path segment to all REST requests."""
    return ConnectionOption("prefix", REST_ONLY, _set("prefix", prefix))


def with_aws_config(config: AwsConfig) -> ConnectionOption:
    """Supply AWS SDK configuration for provider-managed catalogs."""
    return ConnectionOption("aws_config", AWS_CATALOG_TYPES, _set("aws_config", config))


def with_aws_properties(properties: Mapping[str, str]) -> ConnectionOption:
    """Supply free-form AWS provider properties."""
    return ConnectionOption(
        "aws_properties",
        AWS_CATALOG_TYPES,
        _set("aws_properties", dict(properties)),
    )


def with_catalog_properties(properties: Mapping[str, Any]) -> ConnectionOption:
    """Pass free-form properties through to the backend client."""
    return ConnectionOption(
        "catalog_properties",
        ALL_CATALOG_TYPES,
        _set("catalog_properties", dict(properties)),
    )


def build_connection_config(
    catalog_type: CatalogType,
    options: Iterable[ConnectionOption],
) -> ConnectionConfig:
    """Apply options in order to a zero-valued ConnectionConfig.

    Args:
        catalog_type: Backend being constructed.
        options: Connection options, applied in order.

    Returns:
        The immutable connection configuration.

    Raises:
        InvalidOptionError: If an option does not apply to ``catalog_type``.
    """
    fields: dict[str, Any] = {}
    for option in options:
        if not option.accepts(catalog_type):
            raise InvalidOptionError(option.name, catalog_type.value)
        option.apply(fields)
    return ConnectionConfig(**fields)


# ==================== Table-Creation Options ====================


def with_location(location: str) -> CreateTableOption:
    """Set the table location. Trailing ``/`` are stripped."""
    return CreateTableOption("location", _set("location", location.rstrip("/")))


def with_partition_spec(spec: PartitionSpec) -> CreateTableOption:
    """Set the partition specification."""
    return CreateTableOption("partition_spec", _set("partition_spec", spec))


def with_sort_order(order: SortOrder) -> CreateTableOption:
    """Set the sort order."""
    return CreateTableOption("sort_order", _set("sort_order", order))


def with_properties(properties: Mapping[str, str]) -> CreateTableOption:
    """Set the table properties."""
    return CreateTableOption("properties", _set("properties", dict(properties)))


def build_create_table_config(options: Iterable[CreateTableOption]) -> CreateTableConfig:
    """Apply table-creation options in order to a zero-valued CreateTableConfig."""
    fields: dict[str, Any] = {}
    for option in options:
        option.apply(fields)
    return CreateTableConfig(**fields)
