"""
Tests for primary/replica topology assembly and the random read policy.
"""

import random
from dataclasses import replace
from datetime import timedelta

import pytest

from connkit.core.pool_defaults import apply_pool_defaults
from connkit.core.topology import (
    REPLICA_CONN_MAX_IDLE_TIME,
    RandomPolicy,
    assemble_topology,
)
from connkit.exceptions import ConfigurationError
from connkit.models import BackendFamily, ConnectionEndpoint
from connkit.models.enums import NodeRole


@pytest.fixture
def pool():
    return apply_pool_defaults(None, BackendFamily.POSTGRES)


class TestAssembleTopology:
    """Test cases for assemble_topology."""

    def test_primary_only(self, postgres_descriptor, pool):
        """Without replicas there is no read policy and no retention window."""
        topology = assemble_topology(postgres_descriptor, pool)

        assert topology.primary.role is NodeRole.PRIMARY
        assert topology.replicas == ()
        assert topology.read_policy is None
        assert topology.replica_conn_max_idle_time == timedelta(0)

    def test_replicas_share_settings(self, replicated_descriptor, pool):
        """Replica DSNs differ from the primary only in the endpoint."""
        topology = assemble_topology(replicated_descriptor, pool)

        assert [node.role for node in topology.replicas] == [NodeRole.REPLICA, NodeRole.REPLICA]
        assert topology.replicas[0].dsn == topology.primary.dsn.replace("host=db1", "host=db2")
        assert "host=db3 port=5433" in topology.replicas[1].dsn
        assert isinstance(topology.read_policy, RandomPolicy)
        assert topology.replica_conn_max_idle_time == REPLICA_CONN_MAX_IDLE_TIME

    def test_given_policy_attached(self, replicated_descriptor, pool):
        """A caller-supplied policy is used as is."""
        policy = RandomPolicy(random.Random(7))

        assert assemble_topology(replicated_descriptor, pool, policy).read_policy is policy

    def test_malformed_second_replica_fails_everything(self, replicated_descriptor, pool):
        """One replica with an empty host fails the whole topology."""
        descriptor = replace(
            replicated_descriptor,
            replicas=(
                replicated_descriptor.replicas[0],
                ConnectionEndpoint(host="", port="5432", username="app", password="s3cret"),
            ),
        )

        with pytest.raises(ConfigurationError, match="replica 2: host is required"):
            assemble_topology(descriptor, pool)

    def test_bad_primary_port(self, postgres_descriptor, pool):
        """A non-numeric port is a configuration error."""
        descriptor = replace(postgres_descriptor, primary=replace(postgres_descriptor.primary, port="54x"))

        with pytest.raises(ConfigurationError, match="primary: port must be numeric"):
            assemble_topology(descriptor, pool)

    @pytest.mark.parametrize("key", ["bad key", "a=b"])
    def test_param_name_breaking_grammar(self, postgres_descriptor, pool, key):
        """Parameter names that do not survive parsing are rejected."""
        descriptor = replace(postgres_descriptor, params={key: "1"})

        with pytest.raises(ConfigurationError, match="primary: malformed connection string"):
            assemble_topology(descriptor, pool)

    def test_error_message_hides_password(self, postgres_descriptor, pool):
        """The malformed-string error shows a redacted DSN."""
        descriptor = replace(postgres_descriptor, params={"a=b": "1"})

        with pytest.raises(ConfigurationError) as exc_info:
            assemble_topology(descriptor, pool)

        assert "s3cret" not in str(exc_info.value)


class TestRandomPolicy:
    """Test cases for RandomPolicy."""

    def test_choose_from_candidates(self):
        """Choices always come from the candidates."""
        policy = RandomPolicy(random.Random(42))
        candidates = ["r1", "r2", "r3"]

        picks = {policy.choose(candidates) for _ in range(50)}

        assert picks <= set(candidates)
        assert len(picks) > 1

    def test_empty_candidates(self):
        """Choosing from nothing is an error."""
        with pytest.raises(ValueError):
            RandomPolicy().choose([])
