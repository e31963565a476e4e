from __future__ import annotations

import re
import time
from collections.abc import Callable
from typing import Protocol

import duckdb

from telres.core.logging import get_logger
from telres.features.sessions.types import SessionIdentity

from .cookie_jar import CookieJar
from .duckdb_adapter import DuckDBAdapter, SessionRecord

# RFC 1123 date well in the past; forces the jar to drop the cookie.
EXPIRED_COOKIE_DATE = "Thu, 01 Jan 1970 00:00:00 GMT"

_VALID_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class SessionStore(Protocol):
    """
    Persistence capability for one session id per session name.
    load() returns None for absent or unreadable data; it never raises.
    """

    def save(self, name: str, identity: SessionIdentity) -> None: ...
    def load(self, name: str) -> SessionIdentity | None: ...
    def delete(self, name: str) -> None: ...


# ----------------------------
# Durable: cookies
# ----------------------------


class CookieSessionStore:
    """
    Writes `session.<name>.id=<id>[;max-age=<seconds>]` to a cookie jar.
    Survives reloads for as long as the jar keeps the cookie.
    """

    def __init__(self, jar: CookieJar, *, max_age_seconds: int | None = None) -> None:
        if max_age_seconds is not None and int(max_age_seconds) <= 0:
            raise ValueError("max_age_seconds must be > 0")
        self.jar = jar
        self.max_age_seconds = None if max_age_seconds is None else int(max_age_seconds)
        self._logger = get_logger(__name__)

    def save(self, name: str, identity: SessionIdentity) -> None:
        cookie = f"{SessionIdentity.key_for(name)}={identity.id}"
        if self.max_age_seconds is not None:
            cookie += f";max-age={self.max_age_seconds}"
        self.jar.write(cookie)

    def load(self, name: str) -> SessionIdentity | None:
        key = SessionIdentity.key_for(name)
        values = []
        for pair in self.jar.read().split(";"):
            k, sep, v = pair.strip().partition("=")
            if sep and k == key:
                values.append(v)

        if not values:
            return None
        if len(values) != 1 or not _VALID_ID.match(values[0]):
            self._logger.warning(
                "malformed session cookie ignored",
                extra={"session_name": name, "store": "cookie", "reason": "malformed"},
            )
            return None
        return SessionIdentity(id=values[0])

    def delete(self, name: str) -> None:
        self.jar.write(f"{SessionIdentity.key_for(name)}=; expires={EXPIRED_COOKIE_DATE}; path=/")


# ----------------------------
# Ephemeral
# ----------------------------


class NoopSessionStore:
    """
    Remembers nothing: every controller starts without a session.
    """

    def save(self, name: str, identity: SessionIdentity) -> None:
        return None

    def load(self, name: str) -> SessionIdentity | None:
        return None

    def delete(self, name: str) -> None:
        return None


class InMemorySessionStore:
    def __init__(self) -> None:
        self._ids: dict[str, str] = {}

    def save(self, name: str, identity: SessionIdentity) -> None:
        self._ids[name] = identity.id

    def load(self, name: str) -> SessionIdentity | None:
        sid = self._ids.get(name)
        return None if sid is None else SessionIdentity(id=sid)

    def delete(self, name: str) -> None:
        self._ids.pop(name, None)


# ----------------------------
# Durable: local DuckDB file
# ----------------------------


class DuckDBSessionStore:
    """
    One row per session name in a local DuckDB file.
    Rows past their retention window read as absent.
    """

    def __init__(
        self,
        adapter: DuckDBAdapter,
        *,
        max_age_seconds: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_age_seconds is not None and int(max_age_seconds) <= 0:
            raise ValueError("max_age_seconds must be > 0")
        self.adapter = adapter
        self.max_age_seconds = None if max_age_seconds is None else int(max_age_seconds)
        self._clock = clock
        self._logger = get_logger(__name__)

    def save(self, name: str, identity: SessionIdentity) -> None:
        now = float(self._clock())
        expires = None if self.max_age_seconds is None else now + self.max_age_seconds
        self.adapter.upsert(
            SessionRecord(name=name, session_id=identity.id, saved_at_s=now, expires_at_s=expires)
        )

    def load(self, name: str) -> SessionIdentity | None:
        try:
            record = self.adapter.fetch(name)
        except duckdb.Error as exc:
            self._logger.warning(
                "session load failed; treating as absent",
                extra={"session_name": name, "store": "duckdb", "reason": str(exc)},
            )
            return None

        if record is None:
            return None
        if record.expires_at_s is not None and record.expires_at_s <= float(self._clock()):
            return None
        if not _VALID_ID.match(record.session_id):
            return None
        return SessionIdentity(id=record.session_id)

    def delete(self, name: str) -> None:
        self.adapter.remove(name)


def build_store(
    kind: str,
    *,
    jar: CookieJar | None = None,
    adapter: DuckDBAdapter | None = None,
    max_age_seconds: int | None = None,
    clock: Callable[[], float] = time.time,
) -> SessionStore:
    k = (kind or "").strip().lower()
    if k == "cookie":
        if jar is None:
            raise ValueError("cookie store requires a cookie jar")
        return CookieSessionStore(jar, max_age_seconds=max_age_seconds)
    if k == "noop":
        return NoopSessionStore()
    if k == "memory":
        return InMemorySessionStore()
    if k == "duckdb":
        if adapter is None:
            raise ValueError("duckdb store requires a DuckDBAdapter")
        return DuckDBSessionStore(adapter, max_age_seconds=max_age_seconds, clock=clock)
    raise ValueError(f"Unsupported session store: {kind!r}")
