# rank_engine/utils/participant_locks.py
"""
Per-participant locks. Two sales for the same participant must not both
read a stale cycle total; sales for different participants never wait.
"""
from contextlib import contextmanager
from typing import Any, Dict
import logging
import threading

logger = logging.getLogger(__name__)


class ParticipantLocks:
    """Registry of one lock per participant id."""

    _instance = None
    _locks: Dict[Any, threading.Lock]

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._registryLock = threading.Lock()
            cls._instance._locks = {}
        return cls._instance

    def lockFor(self, participantId: Any) -> threading.Lock:
        with self._registryLock:
            lock = self._locks.get(participantId)
            if lock is None:
                lock = threading.Lock()
                self._locks[participantId] = lock
            return lock

    @contextmanager
    def hold(self, participantId: Any):
        """Serialize the read-modify-write of one participant."""
        lock = self.lockFor(participantId)
        with lock:
            logger.debug(f"Lock acquired for participant {participantId}")
            yield

    def __contains__(self, participantId: Any) -> bool:
        with self._registryLock:
            return participantId in self._locks

    def clear(self):
        with self._registryLock:
            self._locks.clear()


# Global instance
participantLocks = ParticipantLocks()
