from __future__ import annotations

import pytest

from telres.features.resource.types import (
    SDK_NAME,
    SERVICE_NAME,
    TELEMETRY_SDK_LANGUAGE,
    TELEMETRY_SDK_NAME,
    AttributeSet,
)


def test_empty_has_no_attributes() -> None:
    a = AttributeSet.empty()
    assert len(a) == 0
    assert dict(a.attributes) == {}


def test_default_carries_sdk_identity() -> None:
    d = AttributeSet.default()
    assert d.get(TELEMETRY_SDK_NAME) == SDK_NAME
    assert d.get(TELEMETRY_SDK_LANGUAGE) == "python"
    assert d.get(SERVICE_NAME) == "unknown_service"


def test_merge_is_right_biased() -> None:
    a = AttributeSet({"k": "left", "only_a": 1})
    b = AttributeSet({"k": "right", "only_b": True})

    c = a.merge(b)

    assert c.get("k") == "right"
    assert c.get("only_a") == 1
    assert c.get("only_b") is True


def test_empty_string_does_not_override_non_empty() -> None:
    a = AttributeSet({"k": "keep"})
    b = AttributeSet({"k": ""})
    assert a.merge(b).get("k") == "keep"


def test_empty_string_fills_missing_key() -> None:
    a = AttributeSet({"x": 1})
    b = AttributeSet({"k": ""})
    assert a.merge(b).get("k") == ""


def test_merge_does_not_mutate_operands() -> None:
    a = AttributeSet({"k": "a"})
    b = AttributeSet({"k": "b"})

    a.merge(b)

    assert a.get("k") == "a"
    assert b.get("k") == "b"


def test_merge_is_associative_without_empty_overrides() -> None:
    a = AttributeSet({"k": 1, "x": "a"})
    b = AttributeSet({"k": 2, "y": "b"})
    c = AttributeSet({"k": 3, "x": "c"})
    assert a.merge(b).merge(c) == a.merge(b.merge(c))


def test_merge_with_none_or_empty_returns_same_set() -> None:
    a = AttributeSet({"k": 1})
    assert a.merge(None) is a
    assert a.merge(AttributeSet.empty()) is a


def test_attributes_view_is_read_only() -> None:
    a = AttributeSet({"k": 1})
    with pytest.raises(TypeError):
        a.attributes["k"] = 2  # type: ignore[index]


def test_input_mapping_is_copied() -> None:
    src = {"k": "v"}
    a = AttributeSet(src)
    src["k"] = "changed"
    assert a.get("k") == "v"


def test_lists_become_tuples() -> None:
    a = AttributeSet({"hosts": ["a", "b"]})
    assert a.get("hosts") == ("a", "b")


def test_invalid_entries_are_dropped() -> None:
    a = AttributeSet(
        {
            "": "empty key",
            "none": None,
            "nested": {"a": 1},
            "mixed": [1, {"b": 2}],
            "ok": 1.5,
        }
    )
    assert dict(a.attributes) == {"ok": 1.5}


def test_without_removes_only_named_keys() -> None:
    a = AttributeSet({"session.a.id": "1", "session.b.id": "2"})

    b = a.without("session.a.id")

    assert "session.a.id" not in b
    assert b.get("session.b.id") == "2"
    assert "session.a.id" in a


def test_without_missing_key_returns_same_set() -> None:
    a = AttributeSet({"k": 1})
    assert a.without("missing") is a
