"""Catalog contract and backend implementations."""

from __future__ import annotations

from floe_catalog.catalogs.base import Catalog
from floe_catalog.catalogs.dynamodb import DynamoDbCatalog
from floe_catalog.catalogs.glue import GlueCatalog
from floe_catalog.catalogs.hive import HiveCatalog
from floe_catalog.catalogs.iceberg import IcebergBackedCatalog
from floe_catalog.catalogs.rest import RestCatalog
from floe_catalog.catalogs.sql import SqlCatalog

__all__ = [
    "Catalog",
    "IcebergBackedCatalog",
    "RestCatalog",
    "HiveCatalog",
    "GlueCatalog",
    "DynamoDbCatalog",
    "SqlCatalog",
]
