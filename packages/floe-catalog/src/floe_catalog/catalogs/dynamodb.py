"""DynamoDB catalog backend."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from floe_catalog.catalogs.iceberg import IcebergBackedCatalog
from floe_catalog.config import CatalogType

if TYPE_CHECKING:
    from pyiceberg.catalog import Catalog as PyIcebergCatalog


class DynamoDbCatalog(IcebergBackedCatalog):
    """Catalog storing table and namespace entries in a DynamoDB table.

    Requires the ``dynamodb`` extra. Accepts the same AWS options as the
    Glue backend.
    """

    CATALOG_TYPE = CatalogType.DYNAMODB

    def _create_client(self, properties: dict[str, Any]) -> PyIcebergCatalog:
        from pyiceberg.catalog.dynamodb import DynamoDbCatalog as PyIcebergDynamoDbCatalog

        return PyIcebergDynamoDbCatalog(self.name, **properties)
