from __future__ import annotations

import argparse
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .config import load_config
from .controller import DroneCommand
from .protocol import decode_frame
from .transport import DroneClient

logger = logging.getLogger(__name__)

DEBUG_ENV_VAR = "LEWEI_DRONE_DEBUG"

HELP_TEXT = """Comandos:
  help
  status
  on | off
  throttle <0..255>
  turn <0..255>
  pitch <0..255>
  roll <0..255>
  center
  takeoff
  land
  calibrate
  lock
  last
  log on|off
  quit
"""

_AXIS_SETTERS = {
    "throttle": "set_throttle",
    "turn": "set_turn",
    "pitch": "set_forward_backward",
    "roll": "set_left_right",
}

_DISCRETE_COMMANDS = {
    "takeoff": "take_off",
    "land": "land",
    "calibrate": "calibrate_gyro",
    "lock": "toggle_motor_lock",
}


class SessionLogger:
    def __init__(self, path: Optional[str]) -> None:
        self._path = Path(path).expanduser() if path else None
        self._file = None
        if self._path is not None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._file = self._path.open("a", encoding="utf-8")

    def write(self, event: str, command: str, state: Optional[dict], extra: Optional[dict] = None) -> None:
        if self._file is None:
            return
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "event": event,
            "command": command,
            "state": state,
            "extra": extra or {},
        }
        self._file.write(json.dumps(payload, ensure_ascii=True) + "\n")
        self._file.flush()

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None


def _parse_on_off(raw: str) -> bool:
    if raw == "on":
        return True
    if raw == "off":
        return False
    raise ValueError("expected 'on' or 'off'")


def _format_command(code: int) -> str:
    try:
        return DroneCommand(code).name
    except ValueError:
        return f"0x{code:02X}"


def _format_state(state: dict) -> str:
    return (
        "state: "
        f"throttle={state['throttle']} "
        f"turn={state['turn']} "
        f"pitch={state['forward_backward']} "
        f"roll={state['left_right']} "
        f"command={_format_command(state['active_command'])}"
    )


def execute_command(client: DroneClient, raw: str) -> str:
    """Run one REPL line against the client and return the text to print.

    Raises ValueError for malformed input.
    """
    parts = raw.split()
    if not parts:
        raise ValueError("comando vacío")
    cmd = parts[0].lower()

    if cmd == "help":
        return HELP_TEXT.rstrip("\n")

    if cmd == "status":
        stats = client.get_stats()
        return "\n".join(
            [
                f"tx={'on' if client.enabled else 'off'} dest={client.host}:{client.port}",
                _format_state(client.get_control_state()),
                "stats: "
                f"tx_ok={stats.tx_frames_ok} tx_err={stats.tx_errors} "
                f"cmd_ok={stats.commands_accepted} cmd_drop={stats.commands_dropped}",
            ]
        )

    if cmd in ("on", "off"):
        if len(parts) != 1:
            raise ValueError(f"uso: {cmd}")
        if cmd == "on":
            client.enable()
        else:
            client.disable()
        return f"tx={cmd}"

    if cmd in _AXIS_SETTERS:
        if len(parts) != 2:
            raise ValueError(f"uso: {cmd} <0..255>")
        applied = getattr(client, _AXIS_SETTERS[cmd])(int(parts[1]))
        return f"{cmd}={applied}"

    if cmd == "center":
        client.center()
        return "ejes en neutro"

    if cmd in _DISCRETE_COMMANDS:
        if not client.enabled:
            logger.warning("TX is off, '%s' will not reach the drone", cmd)
        getattr(client, _DISCRETE_COMMANDS[cmd])()
        return f"{cmd}: comando activo={_format_command(client.active_command)}"

    if cmd == "last":
        frame = client.get_last_frame()
        if frame is None:
            return "last: N/A"
        return f"last: {frame.hex(' ')} {decode_frame(frame).as_dict()}"

    if cmd == "log":
        if len(parts) != 2:
            raise ValueError("uso: log on|off")
        enabled = _parse_on_off(parts[1].lower())
        client.set_log_enabled(enabled)
        return f"log={'on' if enabled else 'off'}"

    return "comando no reconocido. usa: help"


def configure_logging(debug: bool = False) -> None:
    if os.environ.get(DEBUG_ENV_VAR):
        debug = True
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s  %(levelname)-7s  %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def run_cli(args: argparse.Namespace) -> int:
    configure_logging(args.debug)
    try:
        config = load_config(
            args.config,
            {"host": args.host, "port": args.port, "tx_hz": args.tx_hz, "pulse_s": args.pulse_s},
        )
    except ValueError as exc:
        logger.error("config: %s", exc)
        return 2

    client = DroneClient(host=config.host, port=config.port, tx_hz=config.tx_hz, pulse_s=config.pulse_s)
    session = SessionLogger(args.log_file)

    try:
        client.enable()
        print("Drone listo. Escribe 'help' para ver comandos.")

        while True:
            try:
                raw = input("drone> ").strip()
            except EOFError:
                raw = "quit"

            if not raw:
                continue

            if raw.split()[0].lower() == "quit":
                print("saliendo...")
                session.write(event="command", command=raw, state=client.get_control_state())
                break

            try:
                print(execute_command(client, raw))
            except ValueError as exc:
                print(f"error: {exc}")
                continue

            session.write(event="command", command=raw, state=client.get_control_state())

    except KeyboardInterrupt:
        print("\ninterrumpido por usuario")

    finally:
        client.close()
        session.close()

    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Control UDP para drones Lewei")
    parser.add_argument("--config", default=None, help="Archivo YAML opcional con host/port/tx_hz/pulse_s")
    parser.add_argument("--host", default=None, help="IP del drone (default: 192.168.0.1)")
    parser.add_argument("--port", type=int, default=None, help="Puerto UDP del drone (default: 50000)")
    parser.add_argument("--tx-hz", type=float, default=None, help="Frecuencia de TX (default: 20)")
    parser.add_argument(
        "--pulse-s",
        type=float,
        default=None,
        help="Duración de un comando discreto en segundos (default: 0.5)",
    )
    parser.add_argument("--log-file", default=None, help="Ruta opcional para log JSONL de sesión")
    parser.add_argument(
        "--debug",
        action="store_true",
        help=f"Logging en nivel DEBUG (también con la variable {DEBUG_ENV_VAR})",
    )
    return parser
