"""AWS Glue Data Catalog backend."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from floe_catalog.catalogs.iceberg import IcebergBackedCatalog
from floe_catalog.config import CatalogType

if TYPE_CHECKING:
    from pyiceberg.catalog import Catalog as PyIcebergCatalog


class GlueCatalog(IcebergBackedCatalog):
    """Catalog backed by the AWS Glue Data Catalog.

    Requires the ``glue`` extra. AWS credentials and region come from
    with_aws_config / with_aws_properties, falling back to the default
    boto3 credential chain.

    Example:
        >>> from floe_catalog.config import AwsConfig
        >>> from floe_catalog.options import with_aws_config
        >>> catalog = GlueCatalog("glue", with_aws_config(AwsConfig(region="eu-west-1")))
    """

    CATALOG_TYPE = CatalogType.GLUE

    def _create_client(self, properties: dict[str, Any]) -> PyIcebergCatalog:
        from pyiceberg.catalog.glue import GlueCatalog as PyIcebergGlueCatalog

        return PyIcebergGlueCatalog(self.name, **properties)
