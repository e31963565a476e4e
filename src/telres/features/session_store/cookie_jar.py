from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC
from email.utils import parsedate_to_datetime
from typing import Protocol

from telres.core.logging import get_logger


class CookieJar(Protocol):
    """
    Same surface as a browser's document.cookie:
      - read()  -> "a=1; b=2" (live cookies only, no attributes)
      - write() <- "a=1; max-age=60; path=/"
    """

    def read(self) -> str: ...
    def write(self, cookie: str) -> None: ...


@dataclass
class _Cookie:
    value: str
    expires_at: float | None = None  # epoch seconds; None = session cookie


class InMemoryCookieJar:
    """
    Process-local document.cookie emulation.

    Honours max-age (wins over expires) and expires. A write whose lifetime is
    already over removes the cookie. Cookies are keyed by name; path/domain are
    accepted but not scoped.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._cookies: dict[str, _Cookie] = {}
        self._logger = get_logger(__name__)

    def read(self) -> str:
        now = self._clock()
        expired = [n for n, c in self._cookies.items() if c.expires_at is not None and c.expires_at <= now]
        for name in expired:
            del self._cookies[name]
        return "; ".join(f"{n}={c.value}" for n, c in self._cookies.items())

    def write(self, cookie: str) -> None:
        parts = [p.strip() for p in cookie.split(";")]
        name, sep, value = parts[0].partition("=")
        name = name.strip()
        if not sep or not name:
            self._logger.warning("unparseable cookie ignored", extra={"reason": "no_name_value"})
            return

        now = self._clock()
        max_age_at: float | None = None
        expires_at: float | None = None
        for attr in parts[1:]:
            key, _, raw = attr.partition("=")
            key = key.strip().lower()
            raw = raw.strip()
            if key == "max-age":
                try:
                    max_age_at = now + int(raw)
                except ValueError:
                    continue  # browsers ignore an invalid max-age
            elif key == "expires":
                try:
                    dt = parsedate_to_datetime(raw)
                except (TypeError, ValueError):
                    continue
                if dt.tzinfo is None:
                    dt = dt.replace(tzinfo=UTC)
                expires_at = dt.timestamp()

        deadline = max_age_at if max_age_at is not None else expires_at
        if deadline is not None and deadline <= now:
            self._cookies.pop(name, None)
            return

        self._cookies[name] = _Cookie(value=value.strip(), expires_at=deadline)

    def clear(self) -> None:
        self._cookies.clear()
