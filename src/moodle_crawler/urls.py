from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import parse_qs, urlencode, urljoin, urlsplit, urlunsplit

_FETCHABLE_SCHEMES = {"http", "https"}

# Personalised or administrative pages. Following them would crawl every
# user profile, forum thread and message of the site.
_EXCLUDED_PATH_PREFIXES = (
    "/user",
    "/mod/forum",
    "/theme",
    "/course/search.php",
    "/my",
    "/message",
    "/auth",
    "/login",
    "/portfolio",
    "/course/user.php",
    "/grade/report/overview",
)


class UnsupportedSchemeError(ValueError):
    def __init__(self, url: str, scheme: str) -> None:
        super().__init__(f"unsupported URL scheme {scheme!r}: {url}")
        self.url = url
        self.scheme = scheme


@dataclass(frozen=True)
class Resource:
    """Canonical identity of a fetchable URL.

    Only scheme, host, path and the ``id`` query parameter survive
    canonicalization; two URLs that differ in anything else are the same
    resource.
    """

    scheme: str
    host: str
    path: str
    id: str | None = None

    @property
    def url(self) -> str:
        query = urlencode({"id": self.id}) if self.id is not None else ""
        return urlunsplit((self.scheme, self.host, self.path, query, ""))

    def __str__(self) -> str:
        return self.url


def canonicalize(raw_url: str, reference: Resource | None = None) -> Resource:
    """Resolve ``raw_url`` against ``reference`` and reduce it to a Resource.

    Raises UnsupportedSchemeError for anything but http(s) and ValueError
    for URLs urllib cannot parse.
    """

    url = raw_url.strip()
    if reference is not None:
        url = urljoin(reference.url, url)

    parts = urlsplit(url)
    if parts.scheme not in _FETCHABLE_SCHEMES:
        raise UnsupportedSchemeError(url, parts.scheme)

    # Drop userinfo; keep the port. Hosts compare case-insensitively.
    host = parts.netloc.rpartition("@")[2].lower()

    ids = parse_qs(parts.query).get("id")
    resource_id = ids[0] if ids and ids[0] else None

    return Resource(
        scheme=parts.scheme,
        host=host,
        path=parts.path,
        id=resource_id,
    )


def is_relevant(path: str) -> bool:
    if path in {"", "/"}:
        return False
    return not path.startswith(_EXCLUDED_PATH_PREFIXES)


def seed_url(base_url: str, course_id: int) -> str:
    query = urlencode({"id": course_id})
    return f"{base_url.rstrip('/')}/course/view.php?{query}"


@dataclass(frozen=True)
class CourseScope:
    base_scheme: str
    base_host: str
    base_path: str = ""

    @classmethod
    def from_base_url(cls, base_url: str) -> CourseScope:
        parts = urlsplit(base_url)
        return cls(
            base_scheme=parts.scheme,
            base_host=parts.netloc.rpartition("@")[2].lower(),
            base_path=parts.path.rstrip("/"),
        )

    def is_external(self, resource: Resource) -> bool:
        return resource.host != self.base_host

    def is_in_scope(self, resource: Resource) -> bool:
        if self.is_external(resource):
            return False
        path = resource.path
        if self.base_path:
            if path != self.base_path and not path.startswith(self.base_path + "/"):
                return False
            path = path[len(self.base_path) :]
        return is_relevant(path)
