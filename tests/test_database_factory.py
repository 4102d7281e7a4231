"""
Test suite for relational engine configuration, routing and the factory.

Engines are mocked; no database server is needed.
"""

import logging
import random
from dataclasses import replace
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import literal, select, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import QueuePool

from connkit.core.resolver import resolve_relational
from connkit.core.topology import RandomPolicy
from connkit.database.client import RelationalClient
from connkit.database.config import create_node_engine, get_engine_kwargs
from connkit.database.factory import create_relational_client, open_relational
from connkit.exceptions import ClientFactoryError, ConfigurationError
from connkit.models import BackendFamily, ConnectionEndpoint, PoolSettings, RelationalDescriptor
from connkit.models.enums import NodeRole


class TestEngineKwargs:
    """Test cases for get_engine_kwargs."""

    def test_defaults(self, postgres_descriptor):
        """Defaults map to a fixed-size queue pool recycled every five minutes."""
        kwargs = get_engine_kwargs(resolve_relational(postgres_descriptor), NodeRole.PRIMARY)

        assert kwargs['poolclass'] is QueuePool
        assert kwargs['pool_size'] == 25
        assert kwargs['max_overflow'] == 0
        assert kwargs['pool_recycle'] == 300
        assert kwargs['pool_pre_ping'] is False
        assert 'isolation_level' not in kwargs

    def test_idle_below_max(self, postgres_descriptor):
        """Connections above the idle limit become overflow."""
        descriptor = replace(postgres_descriptor, pool=PoolSettings(max_pool_size=50, max_idle_conns=10))

        kwargs = get_engine_kwargs(resolve_relational(descriptor), NodeRole.PRIMARY)

        assert kwargs['pool_size'] == 10
        assert kwargs['max_overflow'] == 40

    def test_idle_capped_by_max(self, postgres_descriptor):
        """The idle limit never exceeds the pool size."""
        descriptor = replace(postgres_descriptor, pool=PoolSettings(max_pool_size=5, max_idle_conns=10))

        kwargs = get_engine_kwargs(resolve_relational(descriptor), NodeRole.PRIMARY)

        assert kwargs['pool_size'] == 5
        assert kwargs['max_overflow'] == 0

    def test_health_check_enables_pre_ping(self, replicated_descriptor):
        """A health-check period turns on pre-ping for primary and replicas alike."""
        resolved = resolve_relational(replace(replicated_descriptor, health_check_period=timedelta(seconds=30)))

        assert get_engine_kwargs(resolved, NodeRole.PRIMARY)['pool_pre_ping'] is True
        assert get_engine_kwargs(resolved, NodeRole.REPLICA)['pool_pre_ping'] is True

    def test_replica_recycle_window(self, replicated_descriptor):
        """Replicas recycle within the one hour retention window."""
        descriptor = replace(replicated_descriptor, pool=PoolSettings(conn_max_lifetime=timedelta(hours=2)))
        resolved = resolve_relational(descriptor)

        assert get_engine_kwargs(resolved, NodeRole.PRIMARY)['pool_recycle'] == 7200
        assert get_engine_kwargs(resolved, NodeRole.REPLICA)['pool_recycle'] == 3600

    def test_skip_default_transaction(self, postgres_descriptor):
        """Skipping the default transaction runs the engine in autocommit."""
        resolved = resolve_relational(replace(postgres_descriptor, preset="transaction-pooler"))

        assert get_engine_kwargs(resolved, NodeRole.PRIMARY)['isolation_level'] == 'AUTOCOMMIT'


class TestCreateNodeEngine:
    """Test cases for create_node_engine."""

    @patch('connkit.database.config.create_engine')
    def test_postgres_uses_creator(self, mock_create_engine, postgres_descriptor):
        """PostgreSQL engines connect through a psycopg creator."""
        resolved = resolve_relational(postgres_descriptor)

        create_node_engine(resolved, resolved.primary)

        args, kwargs = mock_create_engine.call_args
        assert args == ("postgresql+psycopg://",)
        assert callable(kwargs['creator'])
        assert kwargs['poolclass'] is QueuePool

    @patch('connkit.database.config.create_engine')
    def test_mysql_uses_url(self, mock_create_engine):
        """MySQL engines take the resolved URL directly."""
        resolved = resolve_relational(RelationalDescriptor(
            family=BackendFamily.MYSQL,
            primary=ConnectionEndpoint("db1", "3306", "app", "pw"),
            database="orders",
        ))

        create_node_engine(resolved, resolved.primary)

        args, kwargs = mock_create_engine.call_args
        assert args == ("mysql+pymysql://app:pw@db1:3306/orders?charset=utf8mb4",)
        assert 'creator' not in kwargs


class TestRelationalClient:
    """Test cases for RelationalClient."""

    def test_reads_go_to_primary_without_replicas(self, make_engine):
        """With no replicas the primary serves reads."""
        primary = make_engine("primary")
        client = RelationalClient(primary)

        assert client.read_engine() is primary
        assert client.read_policy is None
        assert not client.is_replicated

    def test_reads_use_policy(self, make_engine):
        """Reads are spread over replicas by the read policy."""
        replicas = [make_engine("r1"), make_engine("r2")]
        client = RelationalClient(make_engine("primary"), replicas, RandomPolicy(random.Random(1)))

        picks = {id(client.read_engine()) for _ in range(30)}

        assert picks == {id(r) for r in replicas}

    def test_session_routing(self, make_engine):
        """SELECTs bind to a replica, other statements and flushes to the primary."""
        primary = make_engine("primary")
        replica = make_engine("replica")
        client = RelationalClient(primary, [replica])
        session = client.get_session()

        assert session.get_bind(clause=select(literal(1))) is replica
        assert session.get_bind(clause=text("UPDATE orders SET paid = true")) is primary
        assert session.get_bind() is primary

        session._flushing = True
        assert session.get_bind(clause=select(literal(1))) is primary

    def test_session_context_commits(self, make_engine):
        """The session context commits and closes on success."""
        client = RelationalClient(make_engine())
        session = MagicMock()
        client.SessionLocal = MagicMock(return_value=session)

        with client.session_context() as s:
            assert s is session

        session.commit.assert_called_once()
        session.close.assert_called_once()
        session.rollback.assert_not_called()

    def test_session_context_rolls_back(self, make_engine):
        """Errors roll back the session and propagate."""
        client = RelationalClient(make_engine())
        session = MagicMock()
        client.SessionLocal = MagicMock(return_value=session)

        with pytest.raises(RuntimeError):
            with client.session_context():
                raise RuntimeError("boom")

        session.rollback.assert_called_once()
        session.commit.assert_not_called()
        session.close.assert_called_once()

    def test_ping(self, make_engine):
        """Ping succeeds only when every node answers."""
        primary = make_engine("primary")
        replica = make_engine("replica")
        client = RelationalClient(primary, [replica])

        assert client.ping() is True

        replica.connect.side_effect = OperationalError("SELECT 1", {}, Exception("down"))
        assert client.ping() is False

    def test_pool_status(self, make_engine):
        """Pool statistics are reported per node."""
        client = RelationalClient(make_engine("primary"), [make_engine("replica")])

        status = client.pool_status()

        assert status['primary'] == {
            'pool_size': 5, 'checked_in': 4, 'checked_out': 1, 'overflow': 0,
        }
        assert 'replica_1' in status

    def test_pool_status_unsupported_pool(self, make_engine):
        """A pool without statistics raises with the introspection stage."""
        engine = make_engine()
        engine.pool = object()
        client = RelationalClient(engine)

        with pytest.raises(ClientFactoryError) as exc_info:
            client.pool_status()

        assert exc_info.value.stage == "pool-introspection"

    def test_close_disposes_everything(self, make_engine):
        """Closing disposes the primary and every replica."""
        primary = make_engine("primary")
        replica = make_engine("replica")

        with RelationalClient(primary, [replica]):
            pass

        primary.dispose.assert_called_once()
        replica.dispose.assert_called_once()


class TestRelationalFactory:
    """Test cases for open_relational and create_relational_client."""

    @patch('connkit.database.factory.create_node_engine')
    def test_open_primary_and_replicas(self, mock_create, replicated_descriptor, make_engine):
        """One engine is created per node."""
        engines = [make_engine("primary"), make_engine("r1"), make_engine("r2")]
        mock_create.side_effect = engines

        client = open_relational(replicated_descriptor)

        assert client.primary is engines[0]
        assert client.replicas == tuple(engines[1:])
        assert mock_create.call_count == 3

    @patch('connkit.database.factory.create_node_engine')
    def test_primary_failure(self, mock_create, postgres_descriptor):
        """A primary failure is wrapped with the master-open stage."""
        mock_create.side_effect = RuntimeError("driver missing")

        with pytest.raises(ClientFactoryError) as exc_info:
            open_relational(postgres_descriptor)

        assert exc_info.value.stage == "master-open"
        assert "failed to create master connection" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @patch('connkit.database.factory.create_node_engine')
    def test_replica_failure_disposes_opened_engines(self, mock_create, replicated_descriptor, make_engine):
        """A replica failure disposes what was opened and returns no client."""
        primary = make_engine("primary")
        first_replica = make_engine("r1")
        mock_create.side_effect = [primary, first_replica, RuntimeError("refused")]

        with pytest.raises(ClientFactoryError) as exc_info:
            open_relational(replicated_descriptor)

        assert exc_info.value.stage == "replica-open"
        assert "replica 2" in str(exc_info.value)
        primary.dispose.assert_called_once()
        first_replica.dispose.assert_called_once()

    @patch('connkit.database.factory.create_node_engine')
    def test_verify_failure_on_replica(self, mock_create, replicated_descriptor, make_engine):
        """With verify, an unreachable replica fails construction."""
        engines = [make_engine("primary"), make_engine("r1"), make_engine("r2")]
        engines[1].connect.side_effect = OperationalError("SELECT 1", {}, Exception("down"))
        mock_create.side_effect = engines

        with pytest.raises(ClientFactoryError) as exc_info:
            open_relational(replicated_descriptor, verify=True)

        assert exc_info.value.stage == "replica-open"
        assert "replica 1" in str(exc_info.value)
        for engine in engines[:2]:
            engine.dispose.assert_called_once()

    @patch('connkit.database.factory.create_node_engine')
    def test_verify_failure_on_primary(self, mock_create, replicated_descriptor, make_engine):
        """With verify, an unreachable primary is disposed and no replica is opened."""
        primary = make_engine("primary")
        primary.connect.side_effect = OperationalError("SELECT 1", {}, Exception("down"))
        mock_create.return_value = primary

        with pytest.raises(ClientFactoryError) as exc_info:
            open_relational(replicated_descriptor, verify=True)

        assert exc_info.value.stage == "master-open"
        primary.dispose.assert_called_once()
        assert mock_create.call_count == 1

    @patch('connkit.database.factory.create_node_engine')
    def test_invalid_replica_opens_nothing(self, mock_create, replicated_descriptor):
        """A malformed replica fails resolution before any engine is created."""
        descriptor = replace(
            replicated_descriptor,
            replicas=(replicated_descriptor.replicas[0], ConnectionEndpoint(port="5432")),
        )

        with pytest.raises(ConfigurationError):
            open_relational(descriptor)

        mock_create.assert_not_called()

    @patch('connkit.database.factory.create_node_engine')
    def test_preset_warning_logged(self, mock_create, postgres_descriptor, make_engine, caplog):
        """Resolution warnings are logged at WARNING level."""
        mock_create.return_value = make_engine()
        resolved = resolve_relational(replace(postgres_descriptor, preset="turbo"))

        with caplog.at_level(logging.WARNING, logger="connkit.database.factory"):
            create_relational_client(resolved)

        assert any("unknown preset 'turbo'" in r.message for r in caplog.records)
