from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Mapping

import requests
from requests import exceptions as req_exc
from requests.structures import CaseInsensitiveDict

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    def __init__(self, url: str, reason: Exception | None) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


@dataclass(frozen=True)
class FetchResult:
    url: str
    status_code: int
    headers: Mapping[str, str]
    fetched_at: float
    body: bytes

    @property
    def content_type(self) -> str | None:
        return self.headers.get("Content-Type")

    @property
    def location(self) -> str | None:
        return self.headers.get("Location")


class HttpClient:
    """Single GET per call through an (authenticated) requests session.

    Redirects are not followed: the crawler queues the ``Location`` target
    itself so it goes through deduplication. HTTP error statuses are
    returned as-is; only transport errors are retried, and only when
    ``max_retries`` is set.
    """

    def __init__(
        self,
        session: requests.Session,
        *,
        timeout_s: float = 45,
        max_retries: int = 0,
        backoff_base_s: float = 1.0,
    ) -> None:
        self._session = session
        self._timeout_s = timeout_s
        self._max_retries = max_retries
        self._backoff_base_s = backoff_base_s

    def get(self, url: str) -> FetchResult:
        last_error: Exception | None = None

        for attempt in range(self._max_retries + 1):
            try:
                resp = self._session.get(
                    url, timeout=self._timeout_s, allow_redirects=False
                )
                return FetchResult(
                    url=url,
                    status_code=int(resp.status_code),
                    headers=CaseInsensitiveDict(resp.headers),
                    fetched_at=time.time(),
                    body=resp.content,
                )
            except req_exc.RequestException as e:
                last_error = e
                if attempt >= self._max_retries:
                    break
                wait_s = self._backoff_base_s * (2**attempt)
                logger.warning(
                    "request for %s failed (%s), retrying in %.1fs", url, e, wait_s
                )
                time.sleep(wait_s)

        raise FetchError(url, last_error)
