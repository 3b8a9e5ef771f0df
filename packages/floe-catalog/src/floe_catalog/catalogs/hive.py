"""Hive metastore catalog backend."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from floe_catalog.catalogs.iceberg import IcebergBackedCatalog
from floe_catalog.config import CatalogType

if TYPE_CHECKING:
    from pyiceberg.catalog import Catalog as PyIcebergCatalog


class HiveCatalog(IcebergBackedCatalog):
    """Catalog backed by a Hive metastore over Thrift.

    Requires the ``hive`` extra. The uri is the metastore Thrift endpoint,
    e.g. ``thrift://metastore:9083``.
    """

    CATALOG_TYPE = CatalogType.HIVE

    def _validate_config(self) -> None:
        if not self.config.uri:
            msg = "The hive catalog requires a metastore uri (use with_uri)"
            raise ValueError(msg)

    def _create_client(self, properties: dict[str, Any]) -> PyIcebergCatalog:
        from pyiceberg.catalog.hive import HiveCatalog as PyIcebergHiveCatalog

        return PyIcebergHiveCatalog(self.name, **properties)
