"""
Relational client handle with read/write splitting.

The handle owns one SQLAlchemy engine per topology node. Sessions created
from it send flushes and non-SELECT statements to the primary and route
SELECTs to a replica picked by the read policy.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Sequence

from sqlalchemy import Select, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from ..core.topology import RandomPolicy
from ..exceptions import ClientFactoryError
from ..models.enums import FactoryStage

logger = logging.getLogger(__name__)


class RoutingSession(Session):
    """Session that binds reads to replicas and everything else to the primary."""

    def __init__(self, client: "RelationalClient", **kwargs: Any):
        super().__init__(**kwargs)
        self._client = client

    def get_bind(self, mapper=None, clause=None, **kwargs):
        if self._flushing or not isinstance(clause, Select):
            return self._client.primary
        return self._client.read_engine()


class RelationalClient:
    """
    Live relational client: a primary engine plus optional replica engines.

    The engines' pools are safe to share between threads; this class adds
    no locking of its own.
    """

    def __init__(
        self,
        primary: Engine,
        replicas: Sequence[Engine] = (),
        read_policy: Optional[RandomPolicy] = None,
    ):
        self.primary = primary
        self.replicas = tuple(replicas)
        self.read_policy = (read_policy or RandomPolicy()) if self.replicas else None
        self.SessionLocal = sessionmaker(
            class_=RoutingSession,
            client=self,
            autoflush=False,
            expire_on_commit=False,
        )

    @property
    def is_replicated(self) -> bool:
        return bool(self.replicas)

    def read_engine(self) -> Engine:
        """Engine for read traffic: a policy-chosen replica, else the primary."""
        if not self.replicas:
            return self.primary
        return self.read_policy.choose(self.replicas)

    def get_session(self) -> Session:
        """Get a new routing session."""
        return self.SessionLocal()

    @contextmanager
    def session_context(self) -> Iterator[Session]:
        """
        Get a routing session with automatic cleanup.

        Usage:
            with client.session_context() as session:
                session.execute(select(Order))

        Yields:
            Session that commits on success and rolls back on error
        """
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database session error: {e}")
            raise
        finally:
            session.close()

    def ping(self) -> bool:
        """
        Test connectivity of the primary and every replica.

        Returns:
            True if every node answered, False otherwise
        """
        for engine in (self.primary, *self.replicas):
            try:
                with engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
            except Exception as e:
                logger.error(f"Database connection test failed: {e}")
                return False
        return True

    def pool_status(self) -> Dict[str, Any]:
        """
        Get pool statistics for monitoring.

        Returns:
            Dictionary with one entry for the primary and one per replica

        Raises:
            ClientFactoryError: If an engine's pool cannot report its state
        """
        status: Dict[str, Any] = {"primary": self._engine_pool_status(self.primary)}
        for index, engine in enumerate(self.replicas, start=1):
            status[f"replica_{index}"] = self._engine_pool_status(engine)
        return status

    @staticmethod
    def _engine_pool_status(engine: Engine) -> Dict[str, Any]:
        pool = engine.pool
        try:
            return {
                'pool_size': pool.size(),
                'checked_in': pool.checkedin(),
                'checked_out': pool.checkedout(),
                'overflow': pool.overflow(),
            }
        except AttributeError as e:
            raise ClientFactoryError(
                FactoryStage.POOL_INTROSPECTION,
                f"pool {type(pool).__name__} does not expose statistics",
                e,
            ) from e

    def close(self) -> None:
        """Dispose every engine and close pooled connections."""
        for engine in (self.primary, *self.replicas):
            engine.dispose()
        logger.info("Database connections closed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
