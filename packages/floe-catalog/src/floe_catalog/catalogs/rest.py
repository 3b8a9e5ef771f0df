"""REST catalog backend.

Talks to an Iceberg REST catalog service (Polaris, Nessie, Tabular, ...)
through PyIceberg's RestCatalog. Accepts OAuth2 credential or bearer token,
TLS, SigV4 signing, auth endpoint override and path prefix options.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pyiceberg.catalog.rest import RestCatalog as PyIcebergRestCatalog

from floe_catalog.catalogs.iceberg import IcebergBackedCatalog
from floe_catalog.config import CatalogType

if TYPE_CHECKING:
    from pyiceberg.catalog import Catalog as PyIcebergCatalog


class RestCatalog(IcebergBackedCatalog):
    """Iceberg REST catalog.

    Example:
        >>> from floe_catalog.options import with_credential, with_uri, with_warehouse_location
        >>> catalog = RestCatalog(
        ...     "polaris",
        ...     with_uri("http://localhost:8181/api/catalog"),
        ...     with_warehouse_location("my_warehouse"),
        ...     with_credential("client_id:client_secret"),
        ... )
        >>> catalog.list_namespaces()
        [('bronze',), ('silver',)]
    """

    CATALOG_TYPE = CatalogType.REST

    def _validate_config(self) -> None:
        if not self.config.uri:
            msg = "The rest catalog requires a uri (use with_uri)"
            raise ValueError(msg)
        if not self.config.uri.startswith(("http://", "https://")):
            msg = f"URI must start with http:// or https://, got: {self.config.uri}"
            raise ValueError(msg)

    def _create_client(self, properties: dict[str, Any]) -> PyIcebergCatalog:
        return PyIcebergRestCatalog(self.name, **properties)
