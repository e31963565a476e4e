from __future__ import annotations

from dataclasses import dataclass, field

from telres.core.ids import IdGenerator, generate_session_id


@dataclass(frozen=True, slots=True)
class SessionIdentity:
    """
    One browsing/usage episode.

    A new session is always a new instance; restoring from storage passes the
    stored id explicitly.
    """

    id: str = field(default_factory=generate_session_id)

    @classmethod
    def new(cls, generator: IdGenerator | None = None) -> SessionIdentity:
        if generator is None:
            return cls()
        return cls(id=generator.new_session_id())

    @staticmethod
    def key_for(name: str) -> str:
        # de-facto wire contract read by downstream attribute consumers
        return f"session.{name}.id"

    def to_attribute_fragment(self, name: str) -> dict[str, str]:
        return {self.key_for(name): self.id}
