"""Where saved sessions live: process memory or Redis."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple
import threading
import time

import redis
from redis.exceptions import RedisError
from pydantic import ValidationError

from ..config.models import RedisConfig
from ..models.session import WorkbenchSession
from ..models.errors import SessionException


class SessionStorageInterface(ABC):
    """Keyed, expiring store of :class:`WorkbenchSession` objects."""

    @abstractmethod
    def store_session(self, session: WorkbenchSession, ttl: int) -> None:
        """Store a session under its own ID with a TTL in seconds."""
        pass

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[WorkbenchSession]:
        """Retrieve a session by ID, or None when it is absent or expired."""
        pass

    @abstractmethod
    def delete_session(self, session_id: str) -> bool:
        """Remove a session; False when there was nothing to remove."""
        pass

    @abstractmethod
    def list_sessions(self) -> List[str]:
        """IDs of the sessions that have not expired."""
        pass

    @abstractmethod
    def health_check(self) -> Dict[str, Any]:
        """Status dict with at least ``status`` and ``storage_type``."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the storage."""
        pass

    def exists(self, session_id: str) -> bool:
        return self.get_session(session_id) is not None


class InMemorySessionStorage(SessionStorageInterface):
    """Process-local session storage with lazy expiry."""

    def __init__(self, clock=time.time):
        self._sessions: Dict[str, Tuple[WorkbenchSession, float]] = {}  # session_id -> (session, expiry)
        self._lock = threading.RLock()
        self._clock = clock

    def store_session(self, session: WorkbenchSession, ttl: int) -> None:
        with self._lock:
            self._sessions[session.session_id] = (session, self._clock() + ttl)

    def get_session(self, session_id: str) -> Optional[WorkbenchSession]:
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            session, expiry_time = entry
            if self._clock() > expiry_time:
                del self._sessions[session_id]
                return None
            return session

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def cleanup_expired(self) -> int:
        """Drop expired sessions. Returns the number removed."""
        with self._lock:
            now = self._clock()
            expired = [sid for sid, (_, expiry_time) in self._sessions.items() if expiry_time <= now]
            for session_id in expired:
                del self._sessions[session_id]
            return len(expired)

    def list_sessions(self) -> List[str]:
        with self._lock:
            self.cleanup_expired()
            return list(self._sessions)

    def health_check(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "status": "healthy",
                "storage_type": "in_memory",
                "active_sessions": len(self.list_sessions()),
            }

    def close(self) -> None:
        with self._lock:
            self._sessions.clear()


class RedisSessionStorage(SessionStorageInterface):
    """Sessions as JSON strings under ``<key_prefix><session_id>``, expired by Redis."""

    def __init__(self, redis_config: RedisConfig):
        self.redis_config = redis_config
        self._redis_client: Optional[redis.Redis] = None

    @property
    def redis_client(self) -> redis.Redis:
        """Connected client; the first access pings the server.

        Raises:
            SessionException: If the server cannot be reached
        """
        if self._redis_client is None:
            config = self.redis_config
            client = redis.Redis(
                host=config.host,
                port=config.port,
                password=config.password,
                db=config.db,
                socket_timeout=config.socket_timeout,
                socket_connect_timeout=config.connection_timeout,
                max_connections=config.max_connections,
                decode_responses=True,
                retry_on_timeout=True,
            )
            try:
                client.ping()
            except RedisError as e:
                raise SessionException(
                    "REDIS_CONNECTION_FAILED",
                    f"Cannot reach Redis at {config.host}:{config.port}: {e}",
                    {"host": config.host, "port": config.port},
                )
            self._redis_client = client
        return self._redis_client

    def _key(self, session_id: str) -> str:
        return f"{self.redis_config.key_prefix}{session_id}"

    def _run(self, error_code: str, action: str, command: Callable[[redis.Redis], Any],
             session_id: Optional[str] = None) -> Any:
        """Run a client command, turning Redis failures into SessionException."""
        try:
            return command(self.redis_client)
        except RedisError as e:
            details = {"error_type": type(e).__name__}
            if session_id is not None:
                details["session_id"] = session_id
            raise SessionException(error_code, f"Redis failed to {action}: {e}", details)

    def store_session(self, session: WorkbenchSession, ttl: int) -> None:
        payload = session.model_dump_json(by_alias=True)
        self._run(
            "SESSION_STORAGE_FAILED", "store the session",
            lambda client: client.setex(self._key(session.session_id), ttl, payload),
            session.session_id,
        )

    def get_session(self, session_id: str) -> Optional[WorkbenchSession]:
        payload = self._run(
            "SESSION_RETRIEVAL_FAILED", "read the session",
            lambda client: client.get(self._key(session_id)),
            session_id,
        )
        if payload is None:
            return None

        try:
            return WorkbenchSession.model_validate_json(payload)
        except ValidationError as e:
            raise SessionException(
                "SESSION_DATA_CORRUPTED",
                f"Stored session {session_id} is not a valid session ({e.error_count()} error(s))",
                {"session_id": session_id},
            )

    def delete_session(self, session_id: str) -> bool:
        removed = self._run(
            "SESSION_DELETION_FAILED", "delete the session",
            lambda client: client.delete(self._key(session_id)),
            session_id,
        )
        return int(removed) > 0

    def list_sessions(self) -> List[str]:
        prefix = self.redis_config.key_prefix
        keys = self._run(
            "SESSION_LISTING_FAILED", "list sessions",
            lambda client: list(client.scan_iter(match=f"{prefix}*")),
        )
        return [str(key)[len(prefix):] for key in keys]

    def health_check(self) -> Dict[str, Any]:
        config = self.redis_config
        try:
            reachable = bool(self.redis_client.ping())
        except (SessionException, RedisError) as e:
            return {"status": "unhealthy", "storage_type": "redis", "error": str(e)}
        return {
            "status": "healthy" if reachable else "unhealthy",
            "storage_type": "redis",
            "redis_config": {"host": config.host, "port": config.port, "db": config.db},
        }

    def close(self) -> None:
        client, self._redis_client = self._redis_client, None
        if client is not None:
            client.close()
