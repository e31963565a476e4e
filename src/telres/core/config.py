from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

STORE_KINDS = ("cookie", "noop", "memory", "duckdb")
ID_GENERATORS = ("token", "seeded", "legacy")


@dataclass(frozen=True)
class ResourceConfig:
    attributes: dict[str, Any]


@dataclass(frozen=True)
class SessionConfig:
    """
    max_age_seconds:
      - int  -> retention window written with the persisted session
      - None -> persisted session never expires on its own
    renew_every_seconds:
      - float -> a timed policy renews the session on this interval
      - None  -> no automatic renewal
    """

    name: str
    store: str = "cookie"
    max_age_seconds: int | None = None
    renew_every_seconds: float | None = None
    clear_store_on_end: bool = False


@dataclass(frozen=True)
class IdsConfig:
    generator: str = "token"
    seed: int | None = None


@dataclass(frozen=True)
class StorageConfig:
    duckdb_path: str = "data/sessions.duckdb"
    clean_slate: bool = False


@dataclass(frozen=True)
class RunConfig:
    until_seconds: float = 0.0


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class TelemetryConfig:
    resource: ResourceConfig
    sessions: tuple[SessionConfig, ...]
    ids: IdsConfig
    storage: StorageConfig
    run: RunConfig
    logging: LoggingConfig
    raw: dict[str, Any]  # original parsed YAML (for debugging)


def load_yaml(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    data = yaml.safe_load(p.read_text())
    if not isinstance(data, dict):
        raise ValueError("Config YAML must parse to a dict at the top level.")
    return data


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


def _optional_float(value: Any) -> float | None:
    return None if value is None else float(value)


def _parse_session(raw: Any) -> SessionConfig:
    if not isinstance(raw, dict):
        raise ValueError(f"Each sessions entry must be a mapping, got {type(raw).__name__}")

    name = str(raw.get("name") or "").strip()
    if not name:
        raise ValueError("sessions[].name is required and must be non-empty")

    store = str(raw.get("store", "cookie")).strip().lower()
    if store not in STORE_KINDS:
        raise ValueError(f"Unsupported sessions[{name}].store: {store!r}. Allowed={STORE_KINDS}")

    max_age = _optional_int(raw.get("max_age_seconds"))
    if max_age is not None and max_age <= 0:
        raise ValueError(f"sessions[{name}].max_age_seconds must be > 0")

    renew = _optional_float(raw.get("renew_every_seconds"))
    if renew is not None and renew <= 0:
        raise ValueError(f"sessions[{name}].renew_every_seconds must be > 0")

    return SessionConfig(
        name=name,
        store=store,
        max_age_seconds=max_age,
        renew_every_seconds=renew,
        clear_store_on_end=bool(raw.get("clear_store_on_end", False)),
    )


def parse_config(data: dict[str, Any]) -> TelemetryConfig:
    for key in ["resource", "sessions", "logging"]:
        if key not in data:
            raise ValueError(f"Missing required top-level config section: '{key}'")

    resource = data.get("resource") or {}
    sessions = data.get("sessions") or []
    ids = data.get("ids") or {}
    storage = data.get("storage") or {}
    run = data.get("run") or {}
    logging_cfg = data.get("logging") or {}

    # --- resource ---
    attributes = resource.get("attributes") or {}
    if not isinstance(attributes, dict):
        raise ValueError("resource.attributes must be a mapping")

    # --- sessions ---
    if not isinstance(sessions, list):
        raise ValueError("sessions must be a list")
    session_cfgs = tuple(_parse_session(s) for s in sessions)
    names = [s.name for s in session_cfgs]
    dupes = sorted({n for n in names if names.count(n) > 1})
    if dupes:
        raise ValueError(f"Duplicate session names: {dupes}")

    # --- ids ---
    generator = str(ids.get("generator", "token")).strip().lower()
    if generator not in ID_GENERATORS:
        raise ValueError(f"Unsupported ids.generator: {generator!r}. Allowed={ID_GENERATORS}")

    return TelemetryConfig(
        resource=ResourceConfig(attributes=dict(attributes)),
        sessions=session_cfgs,
        ids=IdsConfig(generator=generator, seed=_optional_int(ids.get("seed"))),
        storage=StorageConfig(
            duckdb_path=str(storage.get("duckdb_path", StorageConfig.duckdb_path)),
            clean_slate=bool(storage.get("clean_slate", False)),
        ),
        run=RunConfig(until_seconds=float(run.get("until_seconds", 0.0))),
        logging=LoggingConfig(level=str(logging_cfg.get("level", "INFO")).upper()),
        raw=data,
    )


def load_config(path: str | Path) -> TelemetryConfig:
    data = load_yaml(path)
    return parse_config(data)
