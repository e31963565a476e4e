from __future__ import annotations

from typing import Any

import simpy

from telres.core.ids import IdGenerator
from telres.core.logging import get_logger
from telres.features.resource.service import AttributeSetHolder
from telres.features.resource.types import AttributeSet
from telres.features.session_store.cookie_jar import CookieJar
from telres.features.session_store.service import CookieSessionStore, SessionStore

from .types import SessionIdentity


class SessionController:
    """
    Keeps one session name projected into one holder.

    States:
      - no session: `session.<name>.id` absent from what this controller wrote
      - active: holder carries `session.<name>.id = active_session.id`

    Controllers sharing a holder are not coordinated. Different names coexist;
    two controllers for the same name race with last-write-wins.
    """

    def __init__(
        self,
        name: str,
        holder: AttributeSetHolder,
        store: SessionStore,
        *,
        id_generator: IdGenerator | None = None,
        clear_store_on_end: bool = False,
    ) -> None:
        name = (name or "").strip()
        if not name:
            raise ValueError("session name must be a non-empty string")

        self._name = name
        self._holder = holder
        self._store = store
        self._ids = id_generator
        self._clear_store_on_end = clear_store_on_end
        self._active: SessionIdentity | None = None
        self._logger = get_logger(__name__)

        restored = self._store.load(name)
        if restored is not None:
            self._active = restored
            self._project()
            self._logger.info(
                "session_restored",
                extra={"event": "session_restored", "session_name": name, "session_id": restored.id},
            )

    @property
    def name(self) -> str:
        return self._name

    @property
    def key(self) -> str:
        return SessionIdentity.key_for(self._name)

    @property
    def holder(self) -> AttributeSetHolder:
        return self._holder

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def active_session(self) -> SessionIdentity | None:
        return self._active

    @property
    def has_active_session(self) -> bool:
        return self._active is not None

    def create_session(self) -> SessionIdentity:
        self.end_session()

        identity = SessionIdentity.new(self._ids)
        self._active = identity
        self._store.save(self._name, identity)
        self._project()

        self._logger.info(
            "session_created",
            extra={"event": "session_created", "session_name": self._name, "session_id": identity.id},
        )
        return identity

    def end_session(self) -> None:
        current = self._holder.get()
        if self.key in current:
            self._holder.replace(current.without(self.key))

        ended, self._active = self._active, None
        if self._clear_store_on_end:
            self._store.delete(self._name)

        if ended is not None:
            self._logger.info(
                "session_ended",
                extra={"event": "session_ended", "session_name": self._name, "session_id": ended.id},
            )

    def _project(self) -> None:
        if self._active is None:
            return
        fragment = AttributeSet(self._active.to_attribute_fragment(self._name))
        self._holder.replace(self._holder.get().merge(fragment))


class TimedSessionPolicy:
    """
    Renews a controller's session on a fixed interval of simulated time.

    Composition over the controller: the policy owns only the schedule.
    Call stop() before discarding the controller.
    """

    def __init__(self, controller: SessionController, *, renew_every_seconds: float) -> None:
        if float(renew_every_seconds) <= 0:
            raise ValueError("renew_every_seconds must be > 0")
        self.controller = controller
        self.renew_every_seconds = float(renew_every_seconds)
        self.renewals = 0
        self._proc: simpy.Process | None = None
        # bumped on every start/stop; a renewal loop exits once its generation is stale
        self._generation = 0

    def renew(self) -> SessionIdentity:
        self.controller.end_session()
        identity = self.controller.create_session()
        self.renewals += 1
        return identity

    def start(self, env: simpy.Environment) -> simpy.Process:
        """
        Start a SimPy process that renews every `renew_every_seconds`.
        Calling start() again while running returns the existing process.
        """
        if self.running:
            return self._proc
        self._generation += 1
        self._proc = env.process(self._renew_proc(env, self._generation))
        return self._proc

    def stop(self) -> None:
        self._generation += 1
        self._proc = None

    @property
    def running(self) -> bool:
        return self._proc is not None and self._proc.is_alive

    def _renew_proc(self, env: simpy.Environment, generation: int):
        while generation == self._generation:
            yield env.timeout(self.renew_every_seconds)
            if generation != self._generation:
                return
            self.renew()


def timed_cookie_session(
    name: str,
    holder: AttributeSetHolder,
    jar: CookieJar,
    *,
    retention_seconds: int,
    **controller_kwargs: Any,
) -> TimedSessionPolicy:
    """
    Cookie-backed controller whose persisted id and renewal share one window.
    """
    store = CookieSessionStore(jar, max_age_seconds=retention_seconds)
    controller = SessionController(name, holder, store, **controller_kwargs)
    return TimedSessionPolicy(controller, renew_every_seconds=retention_seconds)
