"""Pydantic configuration models for floe-catalog.

This module provides:
- CatalogType: Enum of supported catalog backends
- TLSConfig: Transport certificate configuration for REST catalogs
- AwsConfig: AWS SDK configuration for Glue and DynamoDB catalogs
- ConnectionConfig: Backend connection configuration record
- CreateTableConfig: Table-creation configuration record

Both configuration records are built by applying option functions (see
floe_catalog.options) and are immutable once built.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pyiceberg.partitioning import PartitionSpec
from pyiceberg.table.sorting import SortOrder

# PyIceberg catalog property keys
KEY_URI = "uri"
KEY_WAREHOUSE = "warehouse"
KEY_METADATA_LOCATION = "metadata_location"
KEY_CREDENTIAL = "credential"
KEY_TOKEN = "token"
KEY_PREFIX = "prefix"
KEY_OAUTH2_SERVER_URI = "oauth2-server-uri"
KEY_SIGV4 = "rest.sigv4-enabled"
KEY_SIGV4_REGION = "rest.signing-region"
KEY_SIGV4_SERVICE = "rest.signing-name"
KEY_SSL = "ssl"

DEFAULT_SIGV4_SERVICE = "execute-api"


class CatalogType(str, Enum):
    """Supported catalog backends."""

    REST = "rest"
    HIVE = "hive"
    GLUE = "glue"
    DYNAMODB = "dynamodb"
    SQL = "sql"


class TLSConfig(BaseModel):
    """Transport certificate configuration.

    Attributes:
        ca_bundle: Path to a CA bundle used to verify the server certificate.
        client_cert: Path to a client certificate for mutual TLS.
        client_key: Path to the client certificate's private key.

    Example:
        >>> tls = TLSConfig(ca_bundle="/etc/ssl/certs/ca.pem")
        >>> tls.to_properties()
        {'cabundle': '/etc/ssl/certs/ca.pem'}
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    ca_bundle: str | None = Field(default=None, description="CA bundle path")
    client_cert: str | None = Field(default=None, description="Client certificate path")
    client_key: str | None = Field(default=None, description="Client private key path")

    def to_properties(self) -> dict[str, Any]:
        """Render as the nested ``ssl`` property PyIceberg's RestCatalog reads."""
        props: dict[str, Any] = {}
        if self.ca_bundle:
            props["cabundle"] = self.ca_bundle
        client: dict[str, str] = {}
        if self.client_cert:
            client["cert"] = self.client_cert
        if self.client_key:
            client["key"] = self.client_key
        if client:
            props["client"] = client
        return props


class AwsConfig(BaseModel):
    """AWS SDK configuration for provider-managed catalogs.

    Attributes:
        region: AWS region name.
        profile_name: Named profile from the shared credentials file.
        access_key_id: Static access key ID.
        secret_access_key: Static secret access key.
        session_token: Session token for temporary credentials.
        endpoint: Endpoint override (e.g. LocalStack).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    region: str | None = Field(default=None, description="AWS region")
    profile_name: str | None = Field(default=None, description="AWS profile name")
    access_key_id: str | None = Field(default=None, description="AWS access key ID")
    secret_access_key: SecretStr | None = Field(default=None, description="AWS secret key")
    session_token: SecretStr | None = Field(default=None, description="AWS session token")
    endpoint: str | None = Field(default=None, description="Service endpoint override")

    def to_properties(self, prefix: str) -> dict[str, str]:
        """Render as PyIceberg client properties under a service prefix.

        Args:
            prefix: Property prefix of the backend ("glue" or "dynamodb").

        Example:
            >>> AwsConfig(region="eu-west-1").to_properties("glue")
            {'glue.region': 'eu-west-1'}
        """
        props: dict[str, str] = {}
        if self.region:
            props[f"{prefix}.region"] = self.region
        if self.profile_name:
            props[f"{prefix}.profile-name"] = self.profile_name
        if self.access_key_id:
            props[f"{prefix}.access-key-id"] = self.access_key_id
        if self.secret_access_key:
            props[f"{prefix}.secret-access-key"] = self.secret_access_key.get_secret_value()
        if self.session_token:
            props[f"{prefix}.session-token"] = self.session_token.get_secret_value()
        if self.endpoint:
            props[f"{prefix}.endpoint"] = self.endpoint
        return props


class ConnectionConfig(BaseModel):
    """Backend connection configuration record.

    Zero-valued by default; populated by connection options. Fields a backend
    does not understand are never set, because each option is tagged with the
    backends that accept it.

    Attributes:
        uri: Catalog endpoint or connection URI.
        credential: Client credential used for OAuth2 token exchange.
        oauth_token: Pre-obtained OAuth2 bearer token.
        tls: Transport certificate settings.
        warehouse_location: Root storage location advertised to the backend.
        metadata_location: Pinned metadata file location.
        enable_sigv4: Whether requests are SigV4 signed.
        sigv4_region: Signing region.
        sigv4_service: Signing service name.
        auth_uri: Alternate OAuth2 token endpoint.
        prefix: Path prefix prepended to REST requests.
        aws_config: AWS SDK configuration.
        aws_properties: Free-form AWS provider properties.
        catalog_properties: Free-form properties passed through to the client.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    uri: str | None = Field(default=None, description="Catalog URI")
    credential: SecretStr | None = Field(default=None, description="OAuth2 client credential")
    oauth_token: SecretStr | None = Field(default=None, description="OAuth2 bearer token")
    tls: TLSConfig | None = Field(default=None, description="TLS settings")
    warehouse_location: str | None = Field(default=None, description="Warehouse location")
    metadata_location: str | None = Field(default=None, description="Metadata location")
    enable_sigv4: bool = Field(default=False, description="Enable SigV4 request signing")
    sigv4_region: str | None = Field(default=None, description="SigV4 signing region")
    sigv4_service: str | None = Field(default=None, description="SigV4 signing service")
    auth_uri: str | None = Field(default=None, description="OAuth2 token endpoint override")
    prefix: str | None = Field(default=None, description="REST path prefix")
    aws_config: AwsConfig | None = Field(default=None, description="AWS SDK configuration")
    aws_properties: dict[str, str] = Field(default_factory=dict, description="AWS properties")
    catalog_properties: dict[str, Any] = Field(
        default_factory=dict,
        description="Free-form catalog properties",
    )

    @field_validator("uri")
    @classmethod
    def normalize_uri(cls, v: str | None) -> str | None:
        """Strip trailing slashes from the catalog URI."""
        if v is None:
            return v
        if not v:
            msg = "uri must not be empty"
            raise ValueError(msg)
        return v.rstrip("/")

    @field_validator("auth_uri")
    @classmethod
    def validate_auth_uri(cls, v: str | None) -> str | None:
        """Validate the auth URI format (must be http:// or https://)."""
        if v is not None and not v.startswith(("http://", "https://")):
            msg = f"auth_uri must start with http:// or https://, got: {v}"
            raise ValueError(msg)
        return v

    def to_catalog_properties(self, catalog_type: CatalogType) -> dict[str, Any]:
        """Build PyIceberg catalog properties from this record.

        Args:
            catalog_type: Backend the properties are rendered for.

        Returns:
            Dictionary of catalog properties for the PyIceberg client.
        """
        properties: dict[str, Any] = dict(self.catalog_properties)

        if self.uri:
            properties[KEY_URI] = self.uri
        if self.warehouse_location:
            properties[KEY_WAREHOUSE] = self.warehouse_location
        if self.metadata_location:
            properties[KEY_METADATA_LOCATION] = self.metadata_location

        # OAuth2: a pre-obtained token bypasses the credential exchange
        if self.oauth_token:
            properties[KEY_TOKEN] = self.oauth_token.get_secret_value()
        if self.credential:
            properties[KEY_CREDENTIAL] = self.credential.get_secret_value()
        if self.auth_uri:
            properties[KEY_OAUTH2_SERVER_URI] = self.auth_uri
        if self.prefix:
            properties[KEY_PREFIX] = self.prefix

        if self.enable_sigv4:
            properties[KEY_SIGV4] = "true"
            properties[KEY_SIGV4_SERVICE] = self.sigv4_service or DEFAULT_SIGV4_SERVICE
            if self.sigv4_region:
                properties[KEY_SIGV4_REGION] = self.sigv4_region

        if self.tls:
            ssl = self.tls.to_properties()
            if ssl:
                properties[KEY_SSL] = ssl

        if self.aws_config:
            properties.update(self.aws_config.to_properties(catalog_type.value))
        properties.update(self.aws_properties)

        return properties


class CreateTableConfig(BaseModel):
    """Table-creation configuration record.

    Unset fields keep their zero value; the backend supplies its own default
    (unpartitioned, unsorted, catalog-derived location).

    Attributes:
        location: Table location, trailing slashes stripped.
        partition_spec: Partition specification.
        sort_order: Sort order.
        properties: Table properties.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    location: str | None = Field(default=None, description="Table location")
    partition_spec: PartitionSpec | None = Field(default=None, description="Partition spec")
    sort_order: SortOrder | None = Field(default=None, description="Sort order")
    properties: dict[str, str] = Field(default_factory=dict, description="Table properties")

    @field_validator("location")
    @classmethod
    def strip_trailing_separator(cls, v: str | None) -> str | None:
        """Strip trailing path separators from the location."""
        if v is None:
            return v
        return v.rstrip("/")
