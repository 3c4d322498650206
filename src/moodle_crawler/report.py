from __future__ import annotations

import json
import threading
import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

from .urls import CourseScope, Resource


def utc_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def partition(
    done: Iterable[Resource], scope: CourseScope
) -> tuple[list[str], list[str]]:
    """Split visited resources into (downloaded, external) sorted URL lists."""

    downloaded: list[str] = []
    external: list[str] = []
    for resource in done:
        if scope.is_external(resource):
            external.append(str(resource))
        else:
            downloaded.append(str(resource))
    return sorted(downloaded), sorted(external)


def render_summary(downloaded: list[str], external: list[str]) -> str:
    lines = [f"The crawler downloaded {len(downloaded)} moodle resources:"]
    lines.extend(f"\t{url}" for url in downloaded)
    lines.append(f"The crawler found {len(external)} external resources:")
    lines.extend(f"\t{url}" for url in external)
    return "\n".join(lines) + "\n"


def write_summary(
    path: Path, done: Iterable[Resource], scope: CourseScope
) -> Path:
    downloaded, external = partition(done, scope)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        render_summary(downloaded, external), encoding="utf-8", newline="\n"
    )
    return path


class EventKind(str, Enum):
    SAVED = "saved"
    REDIRECT = "redirect"
    BAD_STATUS = "bad_status"
    ERROR = "error"


@dataclass(frozen=True)
class ManifestEvent:
    """What happened to one claimed resource.

    ``file`` is relative to the course directory; ``enqueued`` is the
    frontier's verdict on a redirect target.
    """

    kind: EventKind
    resource: Resource
    status_code: int | None = None
    content_type: str | None = None
    file: str | None = None
    location: str | None = None
    enqueued: str | None = None
    error: str | None = None
    at: str = field(default_factory=utc_iso)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "kind": self.kind.value,
            "url": str(self.resource),
            "resource": asdict(self.resource),
        }
        for name in (
            "status_code",
            "content_type",
            "file",
            "location",
            "enqueued",
            "error",
        ):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        data["at"] = self.at
        return data


class ManifestWriter:
    """``manifest.jsonl`` with one event per claimed resource, plus the
    ``manifest.json`` run summary written at the end of a crawl."""

    def __init__(self, course_dir: Path) -> None:
        self.jsonl_path = course_dir / "manifest.jsonl"
        self.json_path = course_dir / "manifest.json"
        self._lock = threading.Lock()

    def record(self, event: ManifestEvent) -> None:
        line = json.dumps(event.to_dict(), ensure_ascii=False) + "\n"
        with self._lock:
            self.jsonl_path.parent.mkdir(parents=True, exist_ok=True)
            with self.jsonl_path.open("a", encoding="utf-8", newline="\n") as f:
                f.write(line)

    def write_run_summary(self, summary: dict[str, Any]) -> None:
        self.json_path.parent.mkdir(parents=True, exist_ok=True)
        self.json_path.write_text(
            json.dumps(summary, indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
