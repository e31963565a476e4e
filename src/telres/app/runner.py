from __future__ import annotations

from typing import Any

from telres.core.config import TelemetryConfig, load_config
from telres.features.bootstrap.service import bootstrap


def run_config(cfg: TelemetryConfig) -> dict[str, Any]:
    """
    Start any missing sessions, advance simulated time, return the final
    resource attributes (sequences as lists, ready for JSON).
    """
    result = bootstrap(cfg)
    try:
        for controller in result.controllers.values():
            if not controller.has_active_session:
                controller.create_session()

        if cfg.run.until_seconds > 0:
            result.env.run(until=cfg.run.until_seconds)

        attrs = result.holder.get().attributes
        return {k: list(v) if isinstance(v, tuple) else v for k, v in attrs.items()}
    finally:
        result.close()


def run(config_path: str) -> dict[str, Any]:
    cfg = load_config(config_path)
    return run_config(cfg)
