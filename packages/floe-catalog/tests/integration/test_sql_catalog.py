"""Integration tests against a real PyIceberg SQL catalog.

The catalog is stored in a SQLite database under tmp_path, with table
metadata written to a local warehouse directory. Requires the ``test``
extra (SQLAlchemy and PyArrow).

Run tests with:

    pytest -m integration packages/floe-catalog/tests/integration/
"""

from __future__ import annotations

import uuid
from pathlib import Path

import pytest
from pyiceberg.schema import Schema
from pyiceberg.table.update import AssertTableUUID, SetPropertiesUpdate
from pyiceberg.types import LongType, NestedField, StringType

from floe_catalog import create_catalog, create_catalog_from_properties
from floe_catalog.catalogs import SqlCatalog
from floe_catalog.context import OperationContext
from floe_catalog.errors import (
    CommitFailedError,
    NamespaceAlreadyExistsError,
    NamespaceNotEmptyError,
    NoSuchNamespaceError,
    NoSuchTableError,
    PropertiesConflictError,
    TableAlreadyExistsError,
)
from floe_catalog.options import with_properties, with_uri, with_warehouse_location

pytest.importorskip("sqlalchemy")

pytestmark = pytest.mark.integration

SCHEMA = Schema(
    NestedField(field_id=1, name="id", field_type=LongType(), required=True),
    NestedField(field_id=2, name="name", field_type=StringType(), required=False),
)


@pytest.fixture
def catalog(tmp_path: Path) -> SqlCatalog:
    """Create a SQL catalog on SQLite with a local warehouse."""
    warehouse = tmp_path / "warehouse"
    warehouse.mkdir()
    created = create_catalog(
        "sql",
        "local",
        with_uri(f"sqlite:///{tmp_path / 'catalog.db'}"),
        with_warehouse_location(warehouse.as_uri()),
    )
    assert isinstance(created, SqlCatalog)
    return created


@pytest.fixture
def bronze(catalog: SqlCatalog) -> tuple[str, ...]:
    """Create the bronze namespace."""
    catalog.create_namespace(("bronze",), {"owner": "data-eng"})
    return ("bronze",)


class TestNamespaces:
    """Namespace lifecycle against SQLite."""

    def test_create_and_list(self, catalog: SqlCatalog, bronze: tuple[str, ...]) -> None:
        """Test created namespaces are listed."""
        assert bronze in catalog.list_namespaces()
        assert catalog.namespace_exists(bronze)
        assert not catalog.namespace_exists(("missing",))

    def test_create_twice(self, catalog: SqlCatalog, bronze: tuple[str, ...]) -> None:
        """Test creating an existing namespace fails, unless asked to be idempotent."""
        with pytest.raises(NamespaceAlreadyExistsError):
            catalog.create_namespace(bronze)

        catalog.create_namespace_if_not_exists(bronze)

    def test_properties_update(self, catalog: SqlCatalog, bronze: tuple[str, ...]) -> None:
        """Test properties are reconciled and persisted."""
        summary = catalog.update_namespace_properties(
            bronze,
            removals=["owner", "absent"],
            updates={"tier": "raw"},
        )

        assert summary.removed == ["owner"]
        assert summary.updated == ["tier"]
        assert summary.missing == ["absent"]
        props = catalog.load_namespace_properties(bronze)
        assert props["tier"] == "raw"
        assert "owner" not in props

    def test_properties_update_idempotent(
        self, catalog: SqlCatalog, bronze: tuple[str, ...]
    ) -> None:
        """Test repeating an update reports no changes."""
        catalog.update_namespace_properties(bronze, ["owner"], {"tier": "raw"})

        summary = catalog.update_namespace_properties(bronze, ["owner"], {"tier": "raw"})

        assert summary.removed == []
        assert summary.updated == []
        assert summary.missing == ["owner"]

    def test_properties_conflict(self, catalog: SqlCatalog, bronze: tuple[str, ...]) -> None:
        """Test a conflicting update leaves the namespace unchanged."""
        before = catalog.load_namespace_properties(bronze)

        with pytest.raises(PropertiesConflictError):
            catalog.update_namespace_properties(bronze, ["owner"], {"owner": "x"})

        assert catalog.load_namespace_properties(bronze) == before

    def test_drop_non_empty(self, catalog: SqlCatalog, bronze: tuple[str, ...]) -> None:
        """Test a namespace holding tables cannot be dropped."""
        catalog.create_table(bronze + ("events",), SCHEMA)

        with pytest.raises(NamespaceNotEmptyError):
            catalog.drop_namespace(bronze)

    def test_drop(self, catalog: SqlCatalog, bronze: tuple[str, ...]) -> None:
        """Test an empty namespace can be dropped."""
        catalog.drop_namespace(bronze)

        assert not catalog.namespace_exists(bronze)


class TestTables:
    """Table lifecycle against SQLite."""

    def test_create_load_list(self, catalog: SqlCatalog, bronze: tuple[str, ...]) -> None:
        """Test a created table can be loaded and listed."""
        created = catalog.create_table(
            "bronze.events",
            SCHEMA,
            with_properties({"write.format.default": "parquet"}),
        )

        loaded = catalog.load_table(("bronze", "events"))

        assert loaded.metadata.table_uuid == created.metadata.table_uuid
        assert loaded.properties["write.format.default"] == "parquet"
        assert catalog.list_tables(bronze) == [("bronze", "events")]
        assert catalog.table_exists(("bronze", "events"))

    def test_create_existing(self, catalog: SqlCatalog, bronze: tuple[str, ...]) -> None:
        """Test creating a table twice fails."""
        catalog.create_table(("bronze", "events"), SCHEMA)

        with pytest.raises(TableAlreadyExistsError):
            catalog.create_table(("bronze", "events"), SCHEMA)

    def test_create_in_missing_namespace(self, catalog: SqlCatalog) -> None:
        """Test the parent namespace must exist."""
        with pytest.raises(NoSuchNamespaceError):
            catalog.create_table(("missing", "events"), SCHEMA)

    def test_list_missing_namespace(self, catalog: SqlCatalog) -> None:
        """Test listing tables of a missing namespace fails."""
        with pytest.raises(NoSuchNamespaceError):
            catalog.list_tables(("missing",))

    def test_drop_missing(self, catalog: SqlCatalog, bronze: tuple[str, ...]) -> None:
        """Test dropping a missing table fails and leaves the catalog unchanged."""
        catalog.create_table(("bronze", "events"), SCHEMA)

        with pytest.raises(NoSuchTableError):
            catalog.drop_table(("bronze", "missing"))

        assert catalog.list_tables(bronze) == [("bronze", "events")]

    def test_drop(self, catalog: SqlCatalog, bronze: tuple[str, ...]) -> None:
        """Test a dropped table can no longer be loaded."""
        catalog.create_table(("bronze", "events"), SCHEMA)
        catalog.drop_table(("bronze", "events"))

        with pytest.raises(NoSuchTableError):
            catalog.load_table(("bronze", "events"))

    def test_rename(self, catalog: SqlCatalog, bronze: tuple[str, ...]) -> None:
        """Test rename returns the table under its new identifier."""
        created = catalog.create_table(("bronze", "events"), SCHEMA)

        renamed = catalog.rename_table(("bronze", "events"), ("bronze", "events_v2"))

        assert renamed.metadata.table_uuid == created.metadata.table_uuid
        assert catalog.list_tables(bronze) == [("bronze", "events_v2")]

    def test_rename_onto_existing(self, catalog: SqlCatalog, bronze: tuple[str, ...]) -> None:
        """Test renaming onto an existing table changes nothing."""
        catalog.create_table(("bronze", "a"), SCHEMA)
        catalog.create_table(("bronze", "b"), SCHEMA)

        with pytest.raises(TableAlreadyExistsError):
            catalog.rename_table(("bronze", "a"), ("bronze", "b"))

        assert sorted(catalog.list_tables(bronze)) == [("bronze", "a"), ("bronze", "b")]

    def test_commit(self, catalog: SqlCatalog, bronze: tuple[str, ...]) -> None:
        """Test a guarded commit applies its updates."""
        table = catalog.create_table(("bronze", "events"), SCHEMA)

        metadata, location = catalog.commit_table(
            table,
            [AssertTableUUID(uuid=table.metadata.table_uuid)],
            [SetPropertiesUpdate(updates={"owner": "data-eng"})],
        )

        assert metadata.properties["owner"] == "data-eng"
        assert location != table.metadata_location
        assert catalog.load_table(("bronze", "events")).metadata_location == location

    def test_commit_failed_requirement(
        self, catalog: SqlCatalog, bronze: tuple[str, ...]
    ) -> None:
        """Test a stale requirement rejects the whole commit."""
        table = catalog.create_table(("bronze", "events"), SCHEMA)

        with pytest.raises(CommitFailedError):
            catalog.commit_table(
                table,
                [AssertTableUUID(uuid=uuid.uuid4())],
                [SetPropertiesUpdate(updates={"owner": "data-eng"})],
            )

        reloaded = catalog.load_table(("bronze", "events"))
        assert "owner" not in reloaded.properties
        assert reloaded.metadata_location == table.metadata_location

    def test_operation_under_context(self, catalog: SqlCatalog, bronze: tuple[str, ...]) -> None:
        """Test operations run normally under a live context."""
        ctx = OperationContext(timeout=30)

        catalog.create_table(("bronze", "events"), SCHEMA, context=ctx)

        assert catalog.list_tables(bronze, context=ctx) == [("bronze", "events")]


def test_create_from_properties(tmp_path: Path) -> None:
    """Test a catalog configured from a flat property mapping."""
    warehouse = tmp_path / "warehouse"
    warehouse.mkdir()

    catalog = create_catalog_from_properties(
        "local",
        {
            "type": "sql",
            "uri": f"sqlite:///{tmp_path / 'catalog.db'}",
            "warehouse": warehouse.as_uri(),
        },
    )
    catalog.create_namespace("silver")

    assert catalog.list_namespaces() == [("silver",)]
