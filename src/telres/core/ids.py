from __future__ import annotations

import random
import secrets
from dataclasses import dataclass, field
from typing import Protocol

SESSION_ID_BYTES = 16


class IdGenerator(Protocol):
    def new_session_id(self) -> str: ...


def generate_session_id() -> str:
    return secrets.token_hex(SESSION_ID_BYTES)


class TokenIdGenerator:
    """
    Collision-resistant ids from the OS CSPRNG (32 hex chars).
    """

    def new_session_id(self) -> str:
        return generate_session_id()


@dataclass
class SeededIdGenerator:
    """
    Deterministic ids for reproducible runs.
    Same seed -> same sequence of ids.
    """

    seed: int
    _r: random.Random = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._r = random.Random(self.seed)

    def new_session_id(self) -> str:
        return f"{self._r.getrandbits(SESSION_ID_BYTES * 8):0{SESSION_ID_BYTES * 2}x}"


@dataclass
class LegacyIdGenerator:
    """
    Integer ids in [1, 100], rendered as strings.
    Only for compatibility with consumers of the legacy id space: collisions
    are expected after a handful of sessions.
    """

    seed: int | None = None
    _r: random.Random = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._r = random.Random(self.seed)

    def new_session_id(self) -> str:
        return str(self._r.randint(1, 100))


def build_id_generator(kind: str, seed: int | None = None) -> IdGenerator:
    k = (kind or "token").strip().lower()
    if k == "token":
        return TokenIdGenerator()
    if k == "seeded":
        return SeededIdGenerator(seed=int(seed or 0))
    if k == "legacy":
        return LegacyIdGenerator(seed=seed)
    raise ValueError(f"Unsupported ids.generator: {kind!r}")
