"""Shared pytest fixtures for floe-catalog tests."""

from __future__ import annotations

import sys
from unittest.mock import MagicMock

import pytest
import structlog

from floe_catalog.catalogs.rest import RestCatalog
from floe_catalog.options import with_uri, with_warehouse_location


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Send structlog output to stdout so capsys can capture it."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def mock_client() -> MagicMock:
    """Create a mock PyIceberg catalog client."""
    client = MagicMock()
    client.load_namespace_properties.return_value = {}
    client.table_exists.return_value = False
    return client


@pytest.fixture
def catalog(mock_client: MagicMock) -> RestCatalog:
    """Create a REST catalog wired to the mock client."""
    return RestCatalog(
        "test",
        with_uri("http://localhost:8181/api/catalog"),
        with_warehouse_location("test_warehouse"),
        client=mock_client,
    )
