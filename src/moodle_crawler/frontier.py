from __future__ import annotations

import logging
import threading
from collections import deque
from enum import Enum

from .urls import CourseScope, Resource, UnsupportedSchemeError, canonicalize

logger = logging.getLogger(__name__)


class EnqueueResult(str, Enum):
    QUEUED = "queued"
    DUPLICATE = "duplicate"
    EXTERNAL = "external"
    IRRELEVANT = "irrelevant"
    MAILTO = "mailto"
    UNSUPPORTED = "unsupported"
    MALFORMED = "malformed"


class Frontier:
    """Resources waiting to be fetched plus the ones already claimed.

    ``Done`` also holds external resources, which are recorded for the
    summary but never fetched. A resource is in at most one of the two
    collections and never leaves ``Done``.

    When both locks are needed they are taken queue first, then done.
    """

    def __init__(self, scope: CourseScope) -> None:
        self.scope = scope
        self._queue: deque[Resource] = deque()
        self._queued: set[Resource] = set()
        self._done: set[Resource] = set()
        self._queue_lock = threading.Lock()
        self._done_lock = threading.Lock()

    def enqueue(
        self, raw_url: str, reference: Resource | None = None
    ) -> EnqueueResult:
        try:
            resource = canonicalize(raw_url, reference)
        except UnsupportedSchemeError as e:
            if e.scheme == "mailto":
                logger.info("found mail address: %s", e.url)
                return EnqueueResult.MAILTO
            logger.debug("skipping %s", e)
            return EnqueueResult.UNSUPPORTED
        except ValueError as e:
            logger.warning("skipping malformed URL %r: %s", raw_url, e)
            return EnqueueResult.MALFORMED

        if self.scope.is_external(resource):
            with self._done_lock:
                self._done.add(resource)
            return EnqueueResult.EXTERNAL

        if not self.scope.is_in_scope(resource):
            return EnqueueResult.IRRELEVANT

        with self._queue_lock, self._done_lock:
            if resource in self._queued or resource in self._done:
                return EnqueueResult.DUPLICATE
            self._queue.append(resource)
            self._queued.add(resource)
        logger.info("enqueued %s", resource)
        return EnqueueResult.QUEUED

    def pop(self) -> Resource | None:
        with self._queue_lock:
            if not self._queue:
                return None
            resource = self._queue.popleft()
            self._queued.discard(resource)
            return resource

    def mark_done(self, resource: Resource) -> None:
        with self._done_lock:
            self._done.add(resource)

    def claim_next(self) -> Resource | None:
        """Pop the next resource and record it as done in one step.

        Returns None once the queue is empty.
        """

        with self._queue_lock, self._done_lock:
            if not self._queue:
                return None
            resource = self._queue.popleft()
            self._queued.discard(resource)
            self._done.add(resource)
            return resource

    def is_empty(self) -> bool:
        with self._queue_lock:
            return not self._queue

    @property
    def pending_count(self) -> int:
        with self._queue_lock:
            return len(self._queue)

    @property
    def done_count(self) -> int:
        with self._done_lock:
            return len(self._done)

    def queued_snapshot(self) -> tuple[Resource, ...]:
        with self._queue_lock:
            return tuple(self._queue)

    def done_snapshot(self) -> frozenset[Resource]:
        with self._done_lock:
            return frozenset(self._done)
