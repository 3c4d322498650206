from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from pathlib import Path

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from .content import ContentKind, kind_for
from .frontier import Frontier
from .http_client import FetchError, FetchResult, HttpClient
from .pages import process_page
from .report import EventKind, ManifestEvent, ManifestWriter, utc_iso, write_summary
from .storage import CourseStorage
from .urls import CourseScope, Resource, seed_url

logger = logging.getLogger(__name__)


@dataclass
class CrawlConfig:
    base_url: str
    course_id: int
    out_dir: Path
    # Abort the run on the first transport, filesystem or path error instead
    # of skipping the resource.
    fail_fast: bool = False
    show_progress: bool = False


class Crawler:
    def __init__(
        self,
        *,
        http: HttpClient,
        config: CrawlConfig,
    ) -> None:
        self.http = http
        self.cfg = config

        self.scope = CourseScope.from_base_url(self.cfg.base_url)
        self.frontier = Frontier(self.scope)
        self.storage = CourseStorage(self.cfg.out_dir, self.cfg.course_id)
        self.manifest = ManifestWriter(self.storage.course_dir)

        self._stats: Counter[str] = Counter()

    @property
    def seed_url(self) -> str:
        return seed_url(self.cfg.base_url, self.cfg.course_id)

    @property
    def summary_path(self) -> Path:
        return self.storage.summary_path(self.scope.base_scheme, self.scope.base_host)

    def _save(self, resource: Resource, result: FetchResult) -> Path:
        path = self.storage.path_for(resource, result.content_type)
        if kind_for(result.content_type) is ContentKind.HTML:
            document = process_page(result.body, resource, self.frontier.enqueue)
            path.write_text(document, encoding="utf-8")
        else:
            path.write_bytes(result.body)
        return path

    def fetch(self, resource: Resource) -> ManifestEvent:
        """Fetch one resource and dispatch it by status and content type.

        Returns the recorded manifest event. FetchError, OSError and
        ValueError (a URL that cannot become a file name) propagate.
        """

        logger.info("fetching %s", resource)
        result = self.http.get(resource.url)
        status = result.status_code

        if 200 <= status < 300:
            path = self._save(resource, result)
            event = ManifestEvent(
                EventKind.SAVED,
                resource,
                status_code=status,
                content_type=result.content_type,
                file=self.storage.relative(path),
            )
        elif 300 <= status < 400:
            location = result.location
            enqueued = None
            if location:
                logger.info("redirect to %s", location)
                enqueued = self.frontier.enqueue(location, resource).value
            else:
                logger.warning("redirect without location (%d) for %s", status, resource)
            event = ManifestEvent(
                EventKind.REDIRECT,
                resource,
                status_code=status,
                location=location,
                enqueued=enqueued,
            )
        else:
            logger.warning("bad response (%d) for %s", status, resource)
            event = ManifestEvent(EventKind.BAD_STATUS, resource, status_code=status)

        self.manifest.record(event)
        return event

    def crawl(self) -> dict:
        started_at = utc_iso()
        self.frontier.enqueue(self.seed_url)

        with logging_redirect_tqdm(), tqdm(
            desc="Crawling",
            unit="resource",
            total=self.frontier.pending_count,
            disable=not self.cfg.show_progress,
        ) as progress:
            while True:
                resource = self.frontier.claim_next()
                if resource is None:
                    break

                try:
                    kind = self.fetch(resource).kind
                except (FetchError, OSError, ValueError) as e:
                    if self.cfg.fail_fast:
                        raise
                    logger.error("failed to process %s: %s", resource, e)
                    kind = EventKind.ERROR
                    self.manifest.record(ManifestEvent(kind, resource, error=str(e)))

                self._stats[kind.value] += 1
                progress.total = progress.n + 1 + self.frontier.pending_count
                progress.update(1)

        summary_path = write_summary(
            self.summary_path, self.frontier.done_snapshot(), self.scope
        )
        logger.info("wrote summary to %s", summary_path)

        summary = {
            "started_at": started_at,
            "finished_at": utc_iso(),
            "base_url": self.cfg.base_url,
            "course_id": self.cfg.course_id,
            "seed_url": self.seed_url,
            "stats": dict(self._stats),
            "done": self.frontier.done_count,
            "summary_path": self.storage.relative(summary_path),
        }
        self.manifest.write_run_summary(summary)
        return summary
