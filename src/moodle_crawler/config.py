from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

import requests
from dotenv import find_dotenv, load_dotenv

from . import __version__

COOKIE_NAME_ENV = "COOKIE_NAME"
COOKIE_VALUE_ENV = "COOKIE_VALUE"

DEFAULT_USER_AGENT = f"moodle-crawler/{__version__}"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class SessionCookie:
    name: str
    value: str

    def __repr__(self) -> str:
        return f"SessionCookie(name={self.name!r}, value=<hidden>)"


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if not value or not value.strip():
        raise ConfigError(f"{name} is not set (environment or .env file)")
    return value.strip()


def load_session_cookie(env_file: Path | None = None) -> SessionCookie:
    """Read the Moodle session cookie from the environment.

    Values from ``env_file`` (default: a ``.env`` found from the working
    directory upwards) are loaded first; variables already present in the
    environment take precedence.
    """

    if env_file is not None and not env_file.is_file():
        raise ConfigError(f"env file not found: {env_file}")
    load_dotenv(dotenv_path=env_file or find_dotenv(usecwd=True))
    return SessionCookie(
        name=_required_env(COOKIE_NAME_ENV),
        value=_required_env(COOKIE_VALUE_ENV),
    )


def normalize_base_url(value: str) -> str:
    """Turn ``hpi.de`` or ``https://hpi.de/moodle/`` into a base URL."""

    value = value.strip()
    if "://" not in value:
        value = f"https://{value}"
    try:
        parts = urlsplit(value)
        hostname = parts.hostname
    except ValueError as e:
        raise ConfigError(f"invalid base URL {value}: {e}") from e
    if parts.scheme not in {"http", "https"}:
        raise ConfigError(f"base URL must use http or https: {value}")
    if not hostname:
        raise ConfigError(f"base URL has no host: {value}")
    return urlunsplit((parts.scheme, parts.netloc, parts.path.rstrip("/"), "", ""))


def build_session(
    base_url: str,
    cookie: SessionCookie,
    *,
    user_agent: str = DEFAULT_USER_AGENT,
) -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    session.cookies.set(
        cookie.name,
        cookie.value,
        domain=urlsplit(base_url).hostname,
        path="/",
    )
    return session
