from __future__ import annotations

from .types import AttributeSet


class AttributeSetHolder:
    """
    Single source of truth for the current resource.

    - get(): current snapshot (immutable, never None)
    - replace(): unconditional swap; last write wins

    Callers merge before replacing. The swap is one reference assignment, so a
    reader sees either the old or the new set, never a half-built one.
    """

    def __init__(self, initial: AttributeSet | None = None) -> None:
        # baseline attributes always present; caller values win
        self._current = AttributeSet.default().merge(initial or AttributeSet.empty())

    def get(self) -> AttributeSet:
        return self._current

    def replace(self, new_set: AttributeSet) -> None:
        if not isinstance(new_set, AttributeSet):
            raise TypeError(f"replace() expects an AttributeSet, got {type(new_set).__name__}")
        self._current = new_set


_default_holder: AttributeSetHolder | None = None


def default_holder() -> AttributeSetHolder:
    """
    Process-wide convenience holder for top-level wiring only.
    Library code takes a holder explicitly.
    """
    global _default_holder
    if _default_holder is None:
        _default_holder = AttributeSetHolder()
    return _default_holder


def reset_default_holder() -> None:
    global _default_holder
    _default_holder = None
