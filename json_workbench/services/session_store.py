"""Saved sessions with memory-first storage and optional Redis."""

import logging
import uuid
from typing import Any, Dict, Optional, Union

from ..config.models import WorkbenchConfig
from ..models.errors import SessionException
from ..models.history import HistorySnapshot
from ..models.session import WorkbenchSession
from .session_storage import InMemorySessionStorage, RedisSessionStorage, SessionStorageInterface
from .version_history import VersionHistory

# Last-resort history length kept when halving is not enough.
MIN_RETAINED_HISTORY = 10


def _keep_newest(snapshot: HistorySnapshot, keep: int) -> HistorySnapshot:
    dropped = max(len(snapshot.items) - keep, 0)
    if not dropped:
        return snapshot
    items = snapshot.items[dropped:]
    cursor = max(snapshot.cursor - dropped, 0) if items else -1
    return HistorySnapshot(items=items, cursor=cursor)


def _encoded_size(session: WorkbenchSession) -> int:
    return len(session.model_dump_json(by_alias=True).encode("utf-8"))


class SessionStore:
    """Saves and restores workbench sessions.

    Memory storage is always available. When Redis is configured and reachable
    it is used as primary storage if ``prefer_redis`` is set, otherwise as a
    fallback that every save is copied to. A failed write to primary storage
    goes to the fallback instead; a failed or empty read from primary is
    retried on the fallback and the session is synced back.
    """

    def __init__(self, config: Optional[WorkbenchConfig] = None,
                 primary: Optional[SessionStorageInterface] = None,
                 redis_storage: Optional[RedisSessionStorage] = None):
        self.config = config or WorkbenchConfig()
        self.logger = logging.getLogger(__name__)

        self.memory_storage = InMemorySessionStorage()
        self.redis_storage: Optional[RedisSessionStorage] = redis_storage

        if primary is None and redis_storage is None and self.config.redis_config:
            try:
                candidate = RedisSessionStorage(self.config.redis_config)
                candidate.redis_client  # connects and pings
                self.redis_storage = candidate
                self.logger.info("Redis session storage initialized")
            except SessionException as e:
                self.logger.warning(f"Failed to initialize Redis storage: {e.message}. Using memory storage only.")

        if primary is not None:
            self.primary_storage: SessionStorageInterface = primary
            self.fallback_storage: Optional[SessionStorageInterface] = None
        elif self.config.prefer_redis and self.redis_storage:
            self.primary_storage = self.redis_storage
            self.fallback_storage = self.memory_storage
        else:
            self.primary_storage = self.memory_storage
            self.fallback_storage = self.redis_storage

    @property
    def storage_type(self) -> str:
        return "redis" if isinstance(self.primary_storage, RedisSessionStorage) else "memory"

    @property
    def has_redis(self) -> bool:
        return self.redis_storage is not None

    def generate_session_id(self) -> str:
        return f"sess_{uuid.uuid4().hex}"

    def save(
        self,
        document_text: str,
        history: Union[VersionHistory, HistorySnapshot],
        filename: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> WorkbenchSession:
        """Persist the displayed document and its history.

        Sessions larger than ``max_session_bytes`` keep only the newest half
        of the history capacity, then only the newest ten entries.

        Returns:
            The session as stored
        """
        snapshot = history.snapshot() if isinstance(history, VersionHistory) else history
        session = WorkbenchSession(
            session_id=session_id or self.generate_session_id(),
            filename=filename,
            document_text=document_text,
            history=snapshot,
        )

        limit = self.config.max_session_bytes
        size = _encoded_size(session)
        for keep in (self.config.history_config.capacity // 2, MIN_RETAINED_HISTORY):
            if size <= limit:
                break
            self.logger.warning(f"Session {session.session_id} is {size} bytes, keeping newest {keep} history entries")
            session = session.model_copy(update={"history": _keep_newest(session.history, keep)})
            size = _encoded_size(session)
        if size > limit:
            self.logger.warning(f"Session {session.session_id} still exceeds {limit} bytes after trimming history")

        self._store(session)
        self.logger.debug(f"Saved session {session.session_id} ({size} bytes, {self.storage_type})")
        return session

    def _store(self, session: WorkbenchSession) -> None:
        ttl = self.config.session_ttl
        try:
            self.primary_storage.store_session(session, ttl)
        except SessionException as e:
            self.logger.warning(f"Failed to store session {session.session_id} in primary storage: {e.message}")
            if self.fallback_storage is None:
                raise
            try:
                self.fallback_storage.store_session(session, ttl)
            except SessionException as fallback_error:
                self.logger.error(f"Failed to store session in fallback storage: {fallback_error.message}")
                raise e
            self.logger.debug(f"Session {session.session_id} stored in fallback storage")
            return

        # A Redis fallback keeps a copy so sessions outlive the process.
        if self.fallback_storage is not None and self.fallback_storage is self.redis_storage:
            try:
                self.fallback_storage.store_session(session, ttl)
            except SessionException as e:
                self.logger.warning(f"Failed to copy session {session.session_id} to Redis: {e.message}")

    def load(self, session_id: str) -> Optional[WorkbenchSession]:
        """Fetch a saved session from primary storage, then from the fallback.

        A session found only in the fallback is written back to primary storage.
        """
        try:
            session = self.primary_storage.get_session(session_id)
            if session is not None:
                return session
        except SessionException as e:
            self.logger.warning(f"Failed to retrieve session {session_id} from primary storage: {e.message}")

        if self.fallback_storage is None:
            return None
        try:
            session = self.fallback_storage.get_session(session_id)
        except SessionException as e:
            self.logger.warning(f"Fallback storage lookup failed for {session_id}: {e.message}")
            return None

        if session is not None:
            try:
                self.primary_storage.store_session(session, self.config.session_ttl)
                self.logger.debug(f"Session {session_id} synced back to primary storage")
            except SessionException as e:
                self.logger.warning(f"Failed to sync session {session_id} back to primary storage: {e.message}")
        return session

    def restore_history(self, session: WorkbenchSession) -> VersionHistory:
        """Rebuild the version history of a saved session."""
        return VersionHistory.from_snapshot(session.history, self.config.history_config.capacity)

    def delete(self, session_id: str) -> bool:
        deleted = self.primary_storage.delete_session(session_id)
        if self.fallback_storage is not None:
            deleted = self.fallback_storage.delete_session(session_id) or deleted
        return deleted

    def health_check(self) -> Dict[str, Any]:
        status = {"storage_type": self.storage_type, "primary": self.primary_storage.health_check()}
        if self.fallback_storage is not None:
            status["fallback"] = self.fallback_storage.health_check()
        return status

    def close(self) -> None:
        self.memory_storage.close()
        if self.redis_storage is not None:
            self.redis_storage.close()
