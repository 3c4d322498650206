from __future__ import annotations

import logging
import re
import threading
from pathlib import Path

from .content import kind_for
from .urls import Resource

logger = logging.getLogger(__name__)

SUMMARY_FILENAME = "summary.txt"

_UNSAFE_FILENAME_CHARS = re.compile(r"[\x00-\x1F\x7F/\\]")


def _safe_filename_component(text: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", text)


class CourseStorage:
    """Maps resources onto ``<root>/course-<id>/<scheme>-<host>/<path>``.

    Resources that map to the same file overwrite each other; a warning is
    logged when that happens within one run.
    """

    def __init__(self, root: Path, course_id: int) -> None:
        self.root = root
        self.course_id = course_id
        self.course_dir = root / f"course-{course_id}"
        self.course_dir.mkdir(parents=True, exist_ok=True)

        self._issued: dict[Path, Resource] = {}
        self._lock = threading.Lock()

    def host_dir(self, scheme: str, host: str) -> Path:
        return self.course_dir / _safe_filename_component(f"{scheme}-{host}")

    def summary_path(self, scheme: str, host: str) -> Path:
        return self.host_dir(scheme, host) / SUMMARY_FILENAME

    def path_for(self, resource: Resource, content_type: str | None) -> Path:
        path = self.host_dir(resource.scheme, resource.host)
        for segment in resource.path.split("/"):
            # Never let a URL climb out of the host directory.
            if segment in {"", ".", ".."}:
                continue
            path = path / _safe_filename_component(segment)
        if resource.id is not None:
            path = path / _safe_filename_component(f"id-{resource.id}")

        if not path.suffix:
            path = path.with_name(f"{path.name}.{kind_for(content_type).extension}")

        with self._lock:
            previous = self._issued.setdefault(path, resource)
        if previous != resource:
            logger.warning(
                "%s and %s map to the same file, overwriting %s",
                previous,
                resource,
                path,
            )

        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def relative(self, path: Path) -> str:
        return path.relative_to(self.course_dir).as_posix()
