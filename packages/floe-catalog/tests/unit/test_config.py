"""Unit tests for configuration models."""

from __future__ import annotations

import pytest
from pydantic import SecretStr, ValidationError

from floe_catalog.config import (
    AwsConfig,
    CatalogType,
    ConnectionConfig,
    CreateTableConfig,
    TLSConfig,
)


class TestConnectionConfig:
    """Tests for ConnectionConfig validation and property rendering."""

    def test_uri_trailing_slash_stripped(self) -> None:
        """Test the uri is normalized."""
        config = ConnectionConfig(uri="http://localhost:8181/api/catalog/")

        assert config.uri == "http://localhost:8181/api/catalog"

    def test_empty_uri_rejected(self) -> None:
        """Test an empty uri is invalid."""
        with pytest.raises(ValidationError) as exc_info:
            ConnectionConfig(uri="")

        assert "uri" in str(exc_info.value)

    def test_auth_uri_scheme(self) -> None:
        """Test auth_uri must be http or https."""
        with pytest.raises(ValidationError) as exc_info:
            ConnectionConfig(auth_uri="ftp://auth.example.com")

        assert "auth_uri" in str(exc_info.value)

    def test_extra_fields_forbidden(self) -> None:
        """Test unknown fields are rejected."""
        with pytest.raises(ValidationError):
            ConnectionConfig(unknown="value")  # type: ignore[call-arg]

    def test_frozen_model(self) -> None:
        """Test the record is immutable."""
        config = ConnectionConfig(uri="http://localhost:8181")

        with pytest.raises(ValidationError):
            config.uri = "http://other:8181"  # type: ignore[misc]

    def test_secrets_hidden_in_repr(self) -> None:
        """Test credentials never appear in the model repr."""
        config = ConnectionConfig(credential=SecretStr("client:secret"))

        assert "client:secret" not in repr(config)

    def test_rest_properties(self) -> None:
        """Test REST fields map to PyIceberg property keys."""
        config = ConnectionConfig(
            uri="http://localhost:8181/api/catalog",
            warehouse_location="my_warehouse",
            credential=SecretStr("client:secret"),
            oauth_token=SecretStr("t0k3n"),
            auth_uri="https://auth.example.com/token",
            prefix="v2",
            metadata_location="s3://bucket/meta.json",
        )

        props = config.to_catalog_properties(CatalogType.REST)

        assert props == {
            "uri": "http://localhost:8181/api/catalog",
            "warehouse": "my_warehouse",
            "credential": "client:secret",
            "token": "t0k3n",
            "oauth2-server-uri": "https://auth.example.com/token",
            "prefix": "v2",
            "metadata_location": "s3://bucket/meta.json",
        }

    def test_sigv4_properties(self) -> None:
        """Test SigV4 settings render the rest.* signing keys."""
        config = ConnectionConfig(enable_sigv4=True, sigv4_region="us-east-1")

        props = config.to_catalog_properties(CatalogType.REST)

        assert props["rest.sigv4-enabled"] == "true"
        assert props["rest.signing-region"] == "us-east-1"
        assert props["rest.signing-name"] == "execute-api"

    def test_tls_properties(self) -> None:
        """Test TLS settings render as the nested ssl property."""
        config = ConnectionConfig(
            tls=TLSConfig(ca_bundle="/ca.pem", client_cert="/c.pem", client_key="/k.pem")
        )

        props = config.to_catalog_properties(CatalogType.REST)

        assert props["ssl"] == {"cabundle": "/ca.pem", "client": {"cert": "/c.pem", "key": "/k.pem"}}

    def test_empty_tls_omitted(self) -> None:
        """Test an empty TLS config adds no ssl property."""
        props = ConnectionConfig(tls=TLSConfig()).to_catalog_properties(CatalogType.REST)

        assert "ssl" not in props

    def test_aws_properties_prefixed_by_backend(self) -> None:
        """Test AWS settings use the backend's property prefix."""
        config = ConnectionConfig(
            aws_config=AwsConfig(
                region="eu-west-1",
                profile_name="data",
                access_key_id="AKIA",
                secret_access_key=SecretStr("shh"),
                session_token=SecretStr("sess"),
                endpoint="http://localstack:4566",
            ),
            aws_properties={"s3.region": "eu-west-1"},
        )

        glue = config.to_catalog_properties(CatalogType.GLUE)
        dynamo = config.to_catalog_properties(CatalogType.DYNAMODB)

        assert glue["glue.region"] == "eu-west-1"
        assert glue["glue.profile-name"] == "data"
        assert glue["glue.access-key-id"] == "AKIA"
        assert glue["glue.secret-access-key"] == "shh"
        assert glue["glue.session-token"] == "sess"
        assert glue["glue.endpoint"] == "http://localstack:4566"
        assert glue["s3.region"] == "eu-west-1"
        assert dynamo["dynamodb.region"] == "eu-west-1"

    def test_typed_fields_override_catalog_properties(self) -> None:
        """Test free-form properties never shadow a typed option."""
        config = ConnectionConfig(
            uri="sqlite:///catalog.db",
            catalog_properties={"uri": "sqlite:///other.db", "pool_pre_ping": "true"},
        )

        props = config.to_catalog_properties(CatalogType.SQL)

        assert props == {"uri": "sqlite:///catalog.db", "pool_pre_ping": "true"}


class TestCreateTableConfig:
    """Tests for CreateTableConfig."""

    def test_location_stripped(self) -> None:
        """Test trailing slashes are stripped from the location."""
        assert CreateTableConfig(location="s3://b/t/").location == "s3://b/t"

    def test_defaults(self) -> None:
        """Test defaults leave the backend in charge."""
        config = CreateTableConfig()

        assert config.location is None
        assert config.properties == {}


def test_catalog_type_values() -> None:
    """Test CatalogType is a str enum of backend names."""
    assert [t.value for t in CatalogType] == ["rest", "hive", "glue", "dynamodb", "sql"]
    assert CatalogType("glue") is CatalogType.GLUE
