"""
Tests for the psycopg connection glue.
"""

from unittest.mock import patch

import psycopg
from psycopg.conninfo import conninfo_to_dict

from connkit.core.presets import HARD_DEFAULT_BEHAVIOR, TRANSACTION_POOLER_BEHAVIOR
from connkit.database.postgres import (
    build_options,
    connect_kwargs,
    make_creator,
    split_runtime_params,
    to_conninfo,
)

DSN = (
    "host=db1 port=5432 user=app password=s3cret dbname=orders "
    "sslmode=disable search_path=public statement_timeout=30000"
)


class FakeConnection:
    """Stands in for a psycopg connection."""
    pass


class TestRuntimeParams:
    """Test cases for moving runtime parameters into options."""

    def test_split(self):
        """libpq keywords and server settings are separated."""
        connection, runtime = split_runtime_params(
            {"host": "db1", "search_path": "public", "connect_timeout": "5", "work_mem": "64MB"}
        )

        assert connection == {"host": "db1", "connect_timeout": "5"}
        assert runtime == {"search_path": "public", "work_mem": "64MB"}

    def test_build_options_escapes_spaces(self):
        """Spaces and backslashes in values are escaped for the options keyword."""
        assert build_options({"search_path": "a, b", "x": "c\\d"}) == "-c search_path=a,\\ b -c x=c\\\\d"

    def test_to_conninfo(self):
        """The result is accepted by libpq with runtime parameters in options."""
        params = conninfo_to_dict(to_conninfo(DSN))

        assert params["host"] == "db1"
        assert params["dbname"] == "orders"
        assert params["sslmode"] == "disable"
        assert params["options"] == "-c search_path=public -c statement_timeout=30000"
        assert "search_path" not in params


class TestConnectKwargs:
    """Test cases for behavior to psycopg argument mapping."""

    def test_defaults(self):
        """Default behavior adds nothing."""
        assert connect_kwargs(HARD_DEFAULT_BEHAVIOR) == {}

    def test_transaction_pooler(self):
        """The pooler preset disables preparation and uses client-side binding."""
        kwargs = connect_kwargs(TRANSACTION_POOLER_BEHAVIOR)

        assert "prepare_threshold" in kwargs
        assert kwargs["prepare_threshold"] is None
        assert kwargs["cursor_factory"] is psycopg.ClientCursor


class TestMakeCreator:
    """Test cases for make_creator."""

    @patch("connkit.database.postgres.psycopg.connect")
    def test_statement_cache_capacity(self, mock_connect):
        """The prepared statement cache is sized from the behavior bundle."""
        mock_connect.return_value = FakeConnection()

        conn = make_creator(DSN, HARD_DEFAULT_BEHAVIOR)()

        mock_connect.assert_called_once_with(to_conninfo(DSN))
        assert conn.prepared_max == 100

    @patch("connkit.database.postgres.psycopg.connect")
    def test_pooler_leaves_cache_alone(self, mock_connect):
        """With preparation disabled the cache size is not touched."""
        mock_connect.return_value = FakeConnection()

        conn = make_creator(DSN, TRANSACTION_POOLER_BEHAVIOR)()

        _, kwargs = mock_connect.call_args
        assert kwargs["prepare_threshold"] is None
        assert not hasattr(conn, "prepared_max")
