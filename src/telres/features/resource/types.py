from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from telres.core.logging import get_logger
from telres.core.types import SCALAR_TYPES, Attributes, AttributeValue

SDK_NAME = "telres"
SDK_LANGUAGE = "python"
SDK_VERSION = "0.1.0"

SERVICE_NAME = "service.name"
TELEMETRY_SDK_NAME = "telemetry.sdk.name"
TELEMETRY_SDK_LANGUAGE = "telemetry.sdk.language"
TELEMETRY_SDK_VERSION = "telemetry.sdk.version"

_logger = get_logger(__name__)


def _normalize_value(value: Any) -> AttributeValue | None:
    """
    Scalars pass through; lists/tuples of scalars become tuples.
    Anything else is rejected (None).
    """
    if isinstance(value, SCALAR_TYPES):
        return value
    if isinstance(value, (list, tuple)):
        if all(isinstance(v, SCALAR_TYPES) for v in value):
            return tuple(value)
    return None


class AttributeSet:
    """
    Immutable bag of resource attributes.

    All updates produce a new instance; `attributes` is a read-only view over a
    private dict that nothing else holds a reference to.

    Merge is right-biased with one exception: an empty string on the right
    does not override a non-empty value on the left.
    """

    __slots__ = ("_attributes",)

    def __init__(self, attributes: Attributes | None = None) -> None:
        clean: dict[str, AttributeValue] = {}
        for key, value in (attributes or {}).items():
            if not isinstance(key, str) or not key:
                _logger.warning("invalid attribute key dropped", extra={"key": repr(key)})
                continue
            normalized = _normalize_value(value)
            if normalized is None:
                _logger.warning("invalid attribute value dropped", extra={"key": key})
                continue
            clean[key] = normalized
        self._attributes: Mapping[str, AttributeValue] = MappingProxyType(clean)

    # ----------------------------
    # Factories
    # ----------------------------
    @classmethod
    def empty(cls) -> AttributeSet:
        return cls()

    @classmethod
    def default(cls) -> AttributeSet:
        return cls(
            {
                SERVICE_NAME: "unknown_service",
                TELEMETRY_SDK_NAME: SDK_NAME,
                TELEMETRY_SDK_LANGUAGE: SDK_LANGUAGE,
                TELEMETRY_SDK_VERSION: SDK_VERSION,
            }
        )

    # ----------------------------
    # Read-only accessors
    # ----------------------------
    @property
    def attributes(self) -> Mapping[str, AttributeValue]:
        return self._attributes

    def get(self, key: str, default: AttributeValue | None = None) -> AttributeValue | None:
        return self._attributes.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self._attributes

    def __iter__(self) -> Iterator[str]:
        return iter(self._attributes)

    def __len__(self) -> int:
        return len(self._attributes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributeSet):
            return NotImplemented
        return dict(self._attributes) == dict(other._attributes)

    def __hash__(self) -> int:
        return hash(frozenset(self._attributes.items()))

    def __repr__(self) -> str:
        return f"AttributeSet({dict(self._attributes)!r})"

    # ----------------------------
    # Derivations
    # ----------------------------
    def merge(self, other: AttributeSet | None) -> AttributeSet:
        if other is None or not other._attributes:
            return self

        merged = dict(self._attributes)
        for key, value in other._attributes.items():
            if value == "" and merged.get(key, "") != "":
                continue
            merged[key] = value
        return AttributeSet(merged)

    def without(self, *keys: str) -> AttributeSet:
        if not any(k in self._attributes for k in keys):
            return self
        return AttributeSet({k: v for k, v in self._attributes.items() if k not in keys})
