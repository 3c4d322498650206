from __future__ import annotations

import logging
from pathlib import Path

import pytest

from moodle_crawler.storage import CourseStorage
from moodle_crawler.urls import canonicalize


@pytest.fixture
def storage(tmp_path: Path) -> CourseStorage:
    return CourseStorage(tmp_path, 5)


def test_course_dir_is_created(storage: CourseStorage, tmp_path: Path) -> None:
    assert storage.course_dir == tmp_path / "course-5"
    assert storage.course_dir.is_dir()


def test_path_with_id_gets_extension_from_content_type(
    storage: CourseStorage, tmp_path: Path
) -> None:
    resource = canonicalize("https://lms.test/course/view.php?id=5")
    path = storage.path_for(resource, "text/html; charset=utf-8")
    assert path == tmp_path / "course-5/https-lms.test/course/view.php/id-5.html"
    assert path.parent.is_dir()


def test_path_with_extension_is_kept(storage: CourseStorage, tmp_path: Path) -> None:
    resource = canonicalize("https://lms.test/pluginfile.php/9/mod_resource/content/1/slides.pdf")
    path = storage.path_for(resource, "application/octet-stream")
    assert path == (
        tmp_path / "course-5/https-lms.test/pluginfile.php/9/mod_resource/content/1/slides.pdf"
    )


@pytest.mark.parametrize(
    "content_type, suffix",
    [
        ("application/pdf", ".pdf"),
        ("text/html", ".html"),
        ("image/png", ".bin"),
        (None, ".bin"),
    ],
)
def test_extension_mapping(storage: CourseStorage, content_type: str | None, suffix: str) -> None:
    resource = canonicalize("https://lms.test/mod/resource/download")
    assert storage.path_for(resource, content_type).suffix == suffix


def test_paths_stay_inside_host_dir(storage: CourseStorage) -> None:
    resource = canonicalize("https://lms.test/a/../../..//etc/passwd?id=../x")
    path = storage.path_for(resource, "text/html")
    assert storage.host_dir("https", "lms.test") in path.parents


def test_collision_overwrites_with_warning(
    storage: CourseStorage, caplog: pytest.LogCaptureFixture
) -> None:
    a = canonicalize("https://lms.test/mod/page/view.php")
    b = canonicalize("https://lms.test/mod/page/view.php/")
    with caplog.at_level(logging.WARNING, logger="moodle_crawler.storage"):
        assert storage.path_for(a, "text/html") == storage.path_for(b, "text/html")
        assert storage.path_for(a, "text/html") == storage.path_for(a, "text/html")
    assert caplog.text.count("map to the same file") == 1


def test_summary_path(storage: CourseStorage, tmp_path: Path) -> None:
    assert storage.summary_path("https", "lms.test") == (
        tmp_path / "course-5/https-lms.test/summary.txt"
    )


def test_control_characters_are_replaced(storage: CourseStorage, tmp_path: Path) -> None:
    resource = canonicalize("https://lms.test/mod/page/a%5Cb/view.php?id=%00%0A%2F")
    assert resource.id == "\x00\n/"
    path = storage.path_for(resource, "text/html")
    assert path == tmp_path / "course-5/https-lms.test/mod/page/a%5Cb/view.php/id-___.html"
    assert path.parent.is_dir()


def test_relative_is_posix_and_course_rooted(storage: CourseStorage) -> None:
    path = storage.path_for(canonicalize("https://lms.test/a/b.pdf"), None)
    assert storage.relative(path) == "https-lms.test/a/b.pdf"
