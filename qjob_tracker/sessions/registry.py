# qjob_tracker/sessions/registry.py
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Set

import redis.asyncio as aioredis

from ..settings import settings
from .session_data import RealtimeSession

logger = logging.getLogger(__name__)


class AbstractSessionRegistry(ABC):
    """
    Maps live realtime connection ids to the user they authenticated as.

    Every mutation is a single atomic map operation; no operation spans
    more than one connection.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the registry for use."""
        pass

    @abstractmethod
    async def teardown(self) -> None:
        """Release registry resources."""
        pass

    @abstractmethod
    async def connect(self, connection_id: str) -> RealtimeSession:
        """Record a newly accepted connection with no user bound."""
        pass

    @abstractmethod
    async def authenticate(self, connection_id: str, user_id: str) -> RealtimeSession:
        """
        Bind the connection to user_id, replacing any earlier binding.

        The user id is trusted as given; it is not checked against the user
        directory.
        """
        pass

    @abstractmethod
    async def disconnect(self, connection_id: str) -> None:
        """Forget the connection, whatever state it was in."""
        pass

    @abstractmethod
    async def get_session(self, connection_id: str) -> Optional[RealtimeSession]:
        """Return the session for a connection, or None if unknown."""
        pass

    @abstractmethod
    async def list_sessions(self) -> List[RealtimeSession]:
        """Return every registered session."""
        pass

    async def get_user_id(self, connection_id: str) -> Optional[str]:
        """Return the user bound to a connection, or None."""
        session = await self.get_session(connection_id)
        return session.user_id if session else None


class InMemorySessionRegistry(AbstractSessionRegistry):
    """Process-local registry; a dict guarded by an asyncio.Lock."""

    def __init__(self):
        self._sessions: Dict[str, RealtimeSession] = {}
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        logger.info("InMemorySessionRegistry initialized.")

    async def teardown(self) -> None:
        async with self._lock:
            remaining = len(self._sessions)
            self._sessions.clear()
        logger.info(f"InMemorySessionRegistry teardown, dropped {remaining} session(s).")

    async def connect(self, connection_id: str) -> RealtimeSession:
        session = RealtimeSession(connection_id=connection_id)
        async with self._lock:
            self._sessions[connection_id] = session
        return session

    async def authenticate(self, connection_id: str, user_id: str) -> RealtimeSession:
        async with self._lock:
            existing = self._sessions.get(connection_id)
            if existing:
                session = existing.model_copy(update={"user_id": user_id})
            else:
                logger.debug(f"auth for unregistered connection '{connection_id}', registering it.")
                session = RealtimeSession(connection_id=connection_id, user_id=user_id)
            self._sessions[connection_id] = session
        return session

    async def disconnect(self, connection_id: str) -> None:
        async with self._lock:
            self._sessions.pop(connection_id, None)

    async def get_session(self, connection_id: str) -> Optional[RealtimeSession]:
        async with self._lock:
            return self._sessions.get(connection_id)

    async def list_sessions(self) -> List[RealtimeSession]:
        async with self._lock:
            return list(self._sessions.values())


class RedisSessionRegistry(AbstractSessionRegistry):
    """
    Registry stored in a single Redis hash so several server processes can
    see the same bindings. Field: connection id, value: session JSON.
    """

    def __init__(self, hash_key: Optional[str] = None, redis_client: Optional[aioredis.Redis] = None):
        self.hash_key = hash_key or settings.realtime_sessions_redis_key
        self._redis_client: Optional[aioredis.Redis] = redis_client
        # Connections registered through this process, removed from the shared hash on teardown
        self._local_connection_ids: Set[str] = set()

    async def initialize(self) -> None:
        """
        Establishes connection to Redis server using global settings.
        Skips initialization if a client was already provided.
        """
        if self._redis_client:
            logger.info("RedisSessionRegistry using provided Redis client.")
            return

        connection_params = {
            "host": settings.redis_host,
            "port": settings.redis_port,
            "db": settings.redis_db,
            "decode_responses": False,
        }
        if settings.redis_password:
            connection_params["password"] = settings.redis_password

        logger.info(
            f"Connecting to Redis at {connection_params['host']}:"
            f"{connection_params['port']}, DB: {connection_params['db']}"
        )
        try:
            self._redis_client = aioredis.Redis(**connection_params)
            await self._redis_client.ping()
            logger.info("Successfully connected to Redis and pinged.")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}", exc_info=True)
            self._redis_client = None
            raise

    async def teardown(self) -> None:
        if self._redis_client:
            if self._local_connection_ids:
                try:
                    await self._redis_client.hdel(self.hash_key, *self._local_connection_ids)
                    logger.info(f"Removed {len(self._local_connection_ids)} session(s) owned by this process.")
                except Exception as e:
                    logger.error(f"Failed to remove local sessions from Redis: {e}", exc_info=True)
                self._local_connection_ids.clear()
            logger.info("Closing Redis connection.")
            await self._redis_client.aclose()
            self._redis_client = None
            logger.info("Redis connection closed.")

    async def _get_client(self) -> aioredis.Redis:
        if not self._redis_client:
            raise RuntimeError("RedisSessionRegistry not initialized. Call initialize() first.")
        return self._redis_client

    @staticmethod
    def _decode(raw: Optional[bytes]) -> Optional[RealtimeSession]:
        if not raw:
            return None
        try:
            return RealtimeSession.model_validate_json(raw)
        except ValueError as e:
            logger.error(f"Could not deserialize realtime session: {e}")
            return None

    async def connect(self, connection_id: str) -> RealtimeSession:
        client = await self._get_client()
        session = RealtimeSession(connection_id=connection_id)
        await client.hset(self.hash_key, connection_id, session.model_dump_json().encode("utf-8"))
        self._local_connection_ids.add(connection_id)
        return session

    async def authenticate(self, connection_id: str, user_id: str) -> RealtimeSession:
        client = await self._get_client()
        existing = self._decode(await client.hget(self.hash_key, connection_id))
        if existing:
            session = existing.model_copy(update={"user_id": user_id})
        else:
            session = RealtimeSession(connection_id=connection_id, user_id=user_id)
        await client.hset(self.hash_key, connection_id, session.model_dump_json().encode("utf-8"))
        self._local_connection_ids.add(connection_id)
        return session

    async def disconnect(self, connection_id: str) -> None:
        client = await self._get_client()
        await client.hdel(self.hash_key, connection_id)
        self._local_connection_ids.discard(connection_id)

    async def get_session(self, connection_id: str) -> Optional[RealtimeSession]:
        client = await self._get_client()
        return self._decode(await client.hget(self.hash_key, connection_id))

    async def list_sessions(self) -> List[RealtimeSession]:
        client = await self._get_client()
        raw_sessions = await client.hgetall(self.hash_key)
        return [
            session for raw in raw_sessions.values()
            if (session := self._decode(raw)) is not None
        ]


def create_session_registry(backend: Optional[str] = None) -> AbstractSessionRegistry:
    """Build the registry named by settings.session_backend."""
    backend = backend or settings.session_backend
    if backend == "memory":
        return InMemorySessionRegistry()
    if backend == "redis":
        return RedisSessionRegistry()
    raise ValueError(f"Unsupported session_backend: {backend}")
