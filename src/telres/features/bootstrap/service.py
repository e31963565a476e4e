from __future__ import annotations

import time
from dataclasses import dataclass, field

import simpy

from telres.core.config import TelemetryConfig
from telres.core.ids import build_id_generator
from telres.core.logging import get_logger, set_level
from telres.features.resource.service import AttributeSetHolder
from telres.features.resource.types import AttributeSet
from telres.features.session_store.cookie_jar import InMemoryCookieJar
from telres.features.session_store.duckdb_adapter import DuckDBAdapter
from telres.features.session_store.service import build_store
from telres.features.sessions.service import SessionController, TimedSessionPolicy


@dataclass
class BootstrapResult:
    env: simpy.Environment
    holder: AttributeSetHolder
    jar: InMemoryCookieJar
    adapter: DuckDBAdapter | None = None
    controllers: dict[str, SessionController] = field(default_factory=dict)
    policies: dict[str, TimedSessionPolicy] = field(default_factory=dict)

    def close(self) -> None:
        for policy in self.policies.values():
            policy.stop()
        if self.adapter is not None:
            self.adapter.close()


def bootstrap(cfg: TelemetryConfig, *, epoch_s: float | None = None) -> BootstrapResult:
    """
    Wire holder, stores, controllers and renewal policies from config.

    Every time-aware piece reads one clock: wall time at bootstrap plus the
    SimPy environment's elapsed seconds.
    """
    logger = get_logger("telres", cfg.logging.level)
    set_level(cfg.logging.level)

    env = simpy.Environment()
    t0 = time.time() if epoch_s is None else float(epoch_s)

    def clock() -> float:
        return t0 + float(env.now)

    # ----- resource -----
    holder = AttributeSetHolder(AttributeSet(cfg.resource.attributes))

    # ----- stores -----
    jar = InMemoryCookieJar(clock=clock)
    adapter: DuckDBAdapter | None = None
    if any(s.store == "duckdb" for s in cfg.sessions):
        adapter = DuckDBAdapter(path=cfg.storage.duckdb_path, clean_slate=cfg.storage.clean_slate)
        adapter.open()

    ids = build_id_generator(cfg.ids.generator, cfg.ids.seed)
    result = BootstrapResult(env=env, holder=holder, jar=jar, adapter=adapter)

    # ----- controllers (restore happens on construction) -----
    for s in cfg.sessions:
        store = build_store(
            s.store,
            jar=jar,
            adapter=adapter,
            max_age_seconds=s.max_age_seconds,
            clock=clock,
        )
        controller = SessionController(
            s.name,
            holder,
            store,
            id_generator=ids,
            clear_store_on_end=s.clear_store_on_end,
        )
        result.controllers[s.name] = controller

        if s.renew_every_seconds is not None:
            policy = TimedSessionPolicy(controller, renew_every_seconds=s.renew_every_seconds)
            policy.start(env)
            result.policies[s.name] = policy

    logger.info(
        "bootstrap_complete",
        extra={"event": "bootstrap_complete", "store": sorted({s.store for s in cfg.sessions})},
    )
    return result
