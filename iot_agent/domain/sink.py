"""Abstract interface for canonical object sinks.

This decouples the agent from whatever consumes decoded measurements.
Any sink implementation (message bus, storage, in-process consumer) can
implement this interface.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import List, Sequence

import orjson

from .objects import CanonicalObject

logger = logging.getLogger(__name__)


class ObjectSink(ABC):
    """Abstract interface for object sinks.

    Implementations:
    - LoggingSink: Logs each object as JSON
    - CollectingSink: Keeps objects in memory
    - NullSink: No-op
    """

    @abstractmethod
    def publish(self, objects: Sequence[CanonicalObject]) -> bool:
        """Publish decoded objects, in order.

        Returns:
            True if published successfully, False otherwise
        """
        pass


class NullSink(ObjectSink):
    """No-op sink."""

    def publish(self, objects: Sequence[CanonicalObject]) -> bool:
        return True


class LoggingSink(ObjectSink):
    """Writes every object envelope to the log as JSON."""

    def __init__(self, level: int = logging.INFO):
        self._level = level

    def publish(self, objects: Sequence[CanonicalObject]) -> bool:
        for obj in objects:
            logger.log(self._level, "[SINK] %s", orjson.dumps(obj.to_message()).decode("utf-8"))
        return True


class CollectingSink(ObjectSink):
    """Keeps published objects in memory, thread-safe."""

    def __init__(self):
        self._lock = threading.Lock()
        self._objects: List[CanonicalObject] = []

    def publish(self, objects: Sequence[CanonicalObject]) -> bool:
        with self._lock:
            self._objects.extend(objects)
        return True

    @property
    def objects(self) -> List[CanonicalObject]:
        with self._lock:
            return list(self._objects)

    def clear(self) -> None:
        with self._lock:
            self._objects.clear()
