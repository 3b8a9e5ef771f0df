"""SQL-backed catalog backend.

Stores catalog entries in a relational database through SQLAlchemy
(PostgreSQL, MySQL, SQLite). Requires the ``sql`` extra.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from floe_catalog.catalogs.iceberg import IcebergBackedCatalog
from floe_catalog.config import CatalogType

if TYPE_CHECKING:
    from pyiceberg.catalog import Catalog as PyIcebergCatalog


class SqlCatalog(IcebergBackedCatalog):
    """Catalog backed by a SQL database.

    Example:
        >>> from floe_catalog.options import with_uri, with_warehouse_location
        >>> catalog = SqlCatalog(
        ...     "local",
        ...     with_uri("sqlite:////tmp/warehouse/catalog.db"),
        ...     with_warehouse_location("file:///tmp/warehouse"),
        ... )
    """

    CATALOG_TYPE = CatalogType.SQL

    def _validate_config(self) -> None:
        if not self.config.uri:
            msg = "The sql catalog requires a SQLAlchemy database uri (use with_uri)"
            raise ValueError(msg)

    def _create_client(self, properties: dict[str, Any]) -> PyIcebergCatalog:
        from pyiceberg.catalog.sql import SqlCatalog as PyIcebergSqlCatalog

        return PyIcebergSqlCatalog(self.name, **properties)
