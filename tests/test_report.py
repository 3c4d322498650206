from __future__ import annotations

import json
from pathlib import Path

from moodle_crawler.report import (
    EventKind,
    ManifestEvent,
    ManifestWriter,
    partition,
    render_summary,
    write_summary,
)
from moodle_crawler.urls import CourseScope, canonicalize

SCOPE = CourseScope.from_base_url("https://lms.test")


def test_summary_lists_downloaded_and_external_sorted(tmp_path: Path) -> None:
    done = {
        canonicalize("https://lms.test/mod/resource/view.php?id=9"),
        canonicalize("https://other.example.com/c"),
        canonicalize("https://lms.test/course/view.php?id=5"),
    }
    path = write_summary(tmp_path / "https-lms.test" / "summary.txt", done, SCOPE)

    assert path.read_text(encoding="utf-8") == (
        "The crawler downloaded 2 moodle resources:\n"
        "\thttps://lms.test/course/view.php?id=5\n"
        "\thttps://lms.test/mod/resource/view.php?id=9\n"
        "The crawler found 1 external resources:\n"
        "\thttps://other.example.com/c\n"
    )


def test_empty_summary() -> None:
    assert render_summary([], []) == (
        "The crawler downloaded 0 moodle resources:\n"
        "The crawler found 0 external resources:\n"
    )


def test_partition_does_not_mutate_input() -> None:
    done = frozenset(
        {canonicalize("https://a.example/x"), canonicalize("https://lms.test/y")}
    )
    downloaded, external = partition(done, SCOPE)
    assert downloaded == ["https://lms.test/y"]
    assert external == ["https://a.example/x"]
    assert len(done) == 2


def test_manifest_records_typed_events(tmp_path: Path) -> None:
    manifest = ManifestWriter(tmp_path / "course-5")
    page = canonicalize("https://lms.test/mod/page/view.php?id=9")
    manifest.record(
        ManifestEvent(
            EventKind.SAVED,
            page,
            status_code=200,
            content_type="text/html",
            file="https-lms.test/mod/page/view.php/id-9.html",
        )
    )
    manifest.record(
        ManifestEvent(EventKind.ERROR, canonicalize("https://lms.test/x"), error="boom", at="fixed")
    )
    manifest.write_run_summary({"stats": {"saved": 1, "error": 1}})

    lines = manifest.jsonl_path.read_text(encoding="utf-8").splitlines()
    saved, error = (json.loads(line) for line in lines)
    assert saved["kind"] == "saved"
    assert saved["url"] == "https://lms.test/mod/page/view.php?id=9"
    assert saved["resource"] == {
        "scheme": "https",
        "host": "lms.test",
        "path": "/mod/page/view.php",
        "id": "9",
    }
    assert saved["file"] == "https-lms.test/mod/page/view.php/id-9.html"
    assert saved["at"].endswith("Z")
    assert "error" not in saved
    assert error == {
        "kind": "error",
        "url": "https://lms.test/x",
        "resource": {"scheme": "https", "host": "lms.test", "path": "/x", "id": None},
        "error": "boom",
        "at": "fixed",
    }
    assert json.loads(manifest.json_path.read_text(encoding="utf-8")) == {
        "stats": {"saved": 1, "error": 1}
    }
