"""Shared pytest fixtures for all tests."""
import pytest
import os

from table_schema_export.db_introspect.schema_introspector import ColumnDescriptor


@pytest.fixture(scope="session")
def test_db_url():
    """Live database URL; tests that need it are skipped when unset."""
    return os.getenv("TEST_DB_URL")


@pytest.fixture
def users_columns():
    """Two columns of a documented users table."""
    return [
        ColumnDescriptor(
            table_name="users",
            table_description="app users",
            column_name="id",
            ordinal_position=1,
            data_type="integer",
            is_nullable="NO",
            constraint_type="PRIMARY KEY",
        ),
        ColumnDescriptor(
            table_name="users",
            table_description="app users",
            column_name="email",
            ordinal_position=2,
            data_type="text",
            is_nullable="YES",
        ),
    ]


@pytest.fixture
def shop_columns():
    """Three tables in catalog order, one with a foreign key."""
    return [
        ColumnDescriptor("customers", "buyers", "id", "customer id", 1, "bigint", None, "NO",
                         "nextval('customers_id_seq'::regclass)", "PRIMARY KEY"),
        ColumnDescriptor("customers", "buyers", "name", "full name", 2, "character varying", 120, "NO"),
        ColumnDescriptor("orders", None, "id", None, 1, "bigint", None, "NO", None, "PRIMARY KEY"),
        ColumnDescriptor("orders", None, "customer_id", "buyer", 2, "bigint", None, "NO", None,
                         "FOREIGN KEY", "customers", "id"),
        ColumnDescriptor("orders", None, "placed_at", None, 3, "timestamp with time zone", None, "YES",
                         "now()"),
        ColumnDescriptor("audit_log", "append only", "entry", None, 1, "jsonb", None, "YES"),
    ]
