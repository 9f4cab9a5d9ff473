from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .transport import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_PULSE_S, DEFAULT_TX_HZ


@dataclass(slots=True)
class DroneConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    tx_hz: float = DEFAULT_TX_HZ
    pulse_s: float = DEFAULT_PULSE_S

    def as_dict(self) -> dict:
        return asdict(self)


def _coerce(cfg: Dict[str, Any]) -> DroneConfig:
    known = {f.name for f in fields(DroneConfig)}
    unknown = sorted(set(cfg) - known)
    if unknown:
        raise ValueError(f"unknown config keys: {', '.join(unknown)}")

    try:
        config = DroneConfig(
            host=str(cfg.get("host", DEFAULT_HOST)),
            port=int(cfg.get("port", DEFAULT_PORT)),
            tx_hz=float(cfg.get("tx_hz", DEFAULT_TX_HZ)),
            pulse_s=float(cfg.get("pulse_s", DEFAULT_PULSE_S)),
        )
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid config value: {exc}") from exc

    if not 0 < config.port <= 65535:
        raise ValueError(f"port out of range: {config.port}")
    if config.tx_hz <= 0:
        raise ValueError("tx_hz must be > 0")
    if config.pulse_s <= 0:
        raise ValueError("pulse_s must be > 0")
    return config


def load_config(path: Optional[str], overrides: Optional[Dict[str, Any]] = None) -> DroneConfig:
    """Read an optional YAML file and apply non-None overrides on top of it."""
    cfg: Dict[str, Any] = {}
    if path:
        p = Path(path).expanduser()
        if p.exists():
            loaded = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
            if not isinstance(loaded, dict):
                raise ValueError(f"config file must contain a mapping: {p}")
            cfg.update(loaded)
    cfg.update({k: v for k, v in (overrides or {}).items() if v is not None})
    return _coerce(cfg)
