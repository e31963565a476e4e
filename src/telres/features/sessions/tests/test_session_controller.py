from __future__ import annotations

import pytest

from telres.core.ids import SeededIdGenerator
from telres.features.resource.service import AttributeSetHolder
from telres.features.resource.types import SERVICE_NAME, AttributeSet
from telres.features.session_store.cookie_jar import InMemoryCookieJar
from telres.features.session_store.service import (
    CookieSessionStore,
    InMemorySessionStore,
    NoopSessionStore,
)
from telres.features.sessions.service import SessionController
from telres.features.sessions.types import SessionIdentity


class CountingStore(InMemorySessionStore):
    def __init__(self) -> None:
        super().__init__()
        self.saves = 0
        self.deletes = 0

    def save(self, name: str, identity: SessionIdentity) -> None:
        self.saves += 1
        super().save(name, identity)

    def delete(self, name: str) -> None:
        self.deletes += 1
        super().delete(name)


def _holder() -> AttributeSetHolder:
    return AttributeSetHolder(AttributeSet({SERVICE_NAME: "checkout-web"}))


def test_default_scenario_create_projects_and_persists() -> None:
    jar = InMemoryCookieJar(clock=lambda: 0.0)
    store = CookieSessionStore(jar)
    holder = _holder()

    c = SessionController("default", holder, store)
    assert c.has_active_session is False
    assert "session.default.id" not in holder.get()

    identity = c.create_session()

    assert c.has_active_session is True
    assert c.active_session == identity
    assert holder.get().get("session.default.id") == identity.id
    assert holder.get().get(SERVICE_NAME) == "checkout-web"
    assert store.load("default") == identity


def test_construct_without_stored_session_leaves_holder_untouched() -> None:
    holder = _holder()
    before = holder.get()

    SessionController("default", holder, NoopSessionStore())

    assert holder.get() is before


def test_end_session_clears_projection() -> None:
    holder = _holder()
    c = SessionController("default", holder, InMemorySessionStore())
    c.create_session()

    c.end_session()

    assert c.has_active_session is False
    assert c.active_session is None
    assert "session.default.id" not in holder.get()
    assert holder.get().get(SERVICE_NAME) == "checkout-web"


def test_end_session_is_idempotent() -> None:
    holder = _holder()
    c = SessionController("default", holder, InMemorySessionStore())
    c.create_session()

    c.end_session()
    once = holder.get()
    c.end_session()

    assert holder.get() == once
    assert holder.get() is once


def test_end_session_keeps_store_by_default() -> None:
    store = CountingStore()
    c = SessionController("default", _holder(), store)
    identity = c.create_session()

    c.end_session()

    assert store.deletes == 0
    assert store.load("default") == identity


def test_end_session_can_clear_store() -> None:
    store = CountingStore()
    c = SessionController("default", _holder(), store, clear_store_on_end=True)
    c.create_session()

    c.end_session()

    assert store.load("default") is None


def test_create_replaces_previous_session() -> None:
    holder = _holder()
    store = CountingStore()
    c = SessionController("default", holder, store, id_generator=SeededIdGenerator(seed=7))

    first = c.create_session()
    second = c.create_session()

    assert first.id != second.id
    assert holder.get().get("session.default.id") == second.id
    assert store.saves == 2
    assert store.load("default") == second


def test_restore_round_trip_over_cookie_store() -> None:
    jar = InMemoryCookieJar(clock=lambda: 0.0)
    store = CookieSessionStore(jar, max_age_seconds=900)
    store.save("default", SessionIdentity(id="restored01"))

    holder = AttributeSetHolder()
    c = SessionController("default", holder, store)

    assert c.has_active_session is True
    assert c.active_session == SessionIdentity(id="restored01")
    assert holder.get().get("session.default.id") == "restored01"


def test_malformed_cookie_means_no_session() -> None:
    jar = InMemoryCookieJar(clock=lambda: 0.0)
    jar.write("session.default.id=not valid!")
    holder = AttributeSetHolder()

    c = SessionController("default", holder, CookieSessionStore(jar))

    assert c.has_active_session is False
    assert "session.default.id" not in holder.get()


def test_two_names_coexist_on_one_holder() -> None:
    holder = _holder()
    store = InMemorySessionStore()
    a = SessionController("a", holder, store)
    b = SessionController("b", holder, store)

    ia = a.create_session()
    ib = b.create_session()

    attrs = holder.get()
    assert attrs.get("session.a.id") == ia.id
    assert attrs.get("session.b.id") == ib.id

    a.end_session()
    attrs = holder.get()
    assert "session.a.id" not in attrs
    assert attrs.get("session.b.id") == ib.id


def test_same_name_controllers_are_last_write_wins() -> None:
    holder = _holder()
    gen = SeededIdGenerator(seed=1)
    c1 = SessionController("default", holder, InMemorySessionStore(), id_generator=gen)
    c2 = SessionController("default", holder, InMemorySessionStore(), id_generator=gen)

    c1.create_session()
    i2 = c2.create_session()

    assert holder.get().get("session.default.id") == i2.id


@pytest.mark.parametrize("name", ["", "   ", None])
def test_empty_name_is_rejected(name) -> None:
    with pytest.raises(ValueError):
        SessionController(name, _holder(), NoopSessionStore())


def test_key_follows_naming_scheme() -> None:
    c = SessionController("checkout", _holder(), NoopSessionStore())
    assert c.name == "checkout"
    assert c.key == "session.checkout.id"
