from __future__ import annotations

import logging
import socket
import threading
import time
from dataclasses import dataclass
from typing import Optional

from .controller import ControlState, DroneCommand
from .protocol import encode_frame

logger = logging.getLogger(__name__)

DEFAULT_HOST = "192.168.0.1"
DEFAULT_PORT = 50000
DEFAULT_TX_HZ = 20.0
DEFAULT_PULSE_S = 0.5


@dataclass(slots=True)
class CommsStats:
    tx_frames_ok: int = 0
    tx_errors: int = 0
    commands_accepted: int = 0
    commands_dropped: int = 0


class UdpSender:
    """Fire-and-forget UDP datagram sender bound to a single peer."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
        self.host = host
        self.port = int(port)
        self._sock: Optional[socket.socket] = None

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def open(self) -> None:
        if self._sock is None:
            self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

    def send(self, payload: bytes) -> None:
        if self._sock is None:
            raise RuntimeError("socket not open")
        self._sock.sendto(payload, (self.host, self.port))

    def close(self) -> None:
        if self._sock is not None:
            try:
                self._sock.close()
            finally:
                self._sock = None


class DroneClient:
    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        tx_hz: float = DEFAULT_TX_HZ,
        pulse_s: float = DEFAULT_PULSE_S,
        sender=None,
    ) -> None:
        if tx_hz <= 0:
            raise ValueError("tx_hz must be > 0")
        if pulse_s <= 0:
            raise ValueError("pulse_s must be > 0")

        self.host = host
        self.port = int(port)
        self.tx_hz = float(tx_hz)
        self.tx_period_s = 1.0 / self.tx_hz
        self.pulse_s = float(pulse_s)

        self._state = ControlState()
        self._state_lock = threading.Lock()

        self._stats = CommsStats()
        self._stats_lock = threading.Lock()
        self._last_frame: Optional[bytes] = None
        self._error_streak = 0

        self._sender = sender if sender is not None else UdpSender(self.host, self.port)

        self._lifecycle_lock = threading.Lock()
        self._stop_event: Optional[threading.Event] = None
        self._tx_thread: Optional[threading.Thread] = None
        self._pulse_timer: Optional[threading.Timer] = None

        self._log_enabled = False

    def __enter__(self) -> "DroneClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def enabled(self) -> bool:
        return self._tx_thread is not None

    def enable(self) -> None:
        with self._lifecycle_lock:
            if self._tx_thread is not None:
                return

            self._sender.open()
            # Cada loop tiene su propio evento; un hilo viejo nunca se reactiva.
            self._stop_event = threading.Event()
            self._tx_thread = threading.Thread(
                target=self._tx_loop, args=(self._stop_event,), name="drone-udp-tx", daemon=True
            )
            self._tx_thread.start()
        logger.info("TX enabled -> %s:%d every %.0f ms", self.host, self.port, self.tx_period_s * 1000.0)

    def disable(self) -> None:
        with self._lifecycle_lock:
            thread = self._tx_thread
            if thread is None:
                return

            self._stop_event.set()
            if thread is not threading.current_thread():
                thread.join(timeout=1.5)
                if thread.is_alive():
                    logger.warning("TX thread did not stop within 1.5 s, abandoning it")
            self._stop_event = None
            self._tx_thread = None
            self._sender.close()
        logger.info("TX disabled")

    def close(self) -> None:
        self.disable()
        with self._state_lock:
            timer = self._pulse_timer
            self._pulse_timer = None
            self._state.active_command = DroneCommand.NONE
        if timer is not None:
            timer.cancel()

    @property
    def throttle(self) -> int:
        with self._state_lock:
            return self._state.throttle

    @throttle.setter
    def throttle(self, value: int) -> None:
        self.set_throttle(value)

    @property
    def turn(self) -> int:
        with self._state_lock:
            return self._state.turn

    @turn.setter
    def turn(self, value: int) -> None:
        self.set_turn(value)

    @property
    def forward_backward(self) -> int:
        with self._state_lock:
            return self._state.forward_backward

    @forward_backward.setter
    def forward_backward(self, value: int) -> None:
        self.set_forward_backward(value)

    @property
    def left_right(self) -> int:
        with self._state_lock:
            return self._state.left_right

    @left_right.setter
    def left_right(self, value: int) -> None:
        self.set_left_right(value)

    @property
    def active_command(self) -> int:
        with self._state_lock:
            return self._state.active_command

    def set_throttle(self, value: int) -> int:
        with self._state_lock:
            return self._state.set_throttle(value)

    def set_turn(self, value: int) -> int:
        with self._state_lock:
            return self._state.set_turn(value)

    def set_forward_backward(self, value: int) -> int:
        with self._state_lock:
            return self._state.set_forward_backward(value)

    def set_left_right(self, value: int) -> int:
        with self._state_lock:
            return self._state.set_left_right(value)

    def center(self) -> None:
        with self._state_lock:
            self._state.center()

    def take_off(self) -> None:
        self._request_command(DroneCommand.TAKE_OFF)

    def land(self) -> None:
        self._request_command(DroneCommand.LAND)

    def calibrate_gyro(self) -> None:
        self._request_command(DroneCommand.CALIBRATE_GYRO)

    def toggle_motor_lock(self) -> None:
        self._request_command(DroneCommand.UNLOCK_MOTOR)

    def set_log_enabled(self, enabled: bool) -> None:
        self._log_enabled = bool(enabled)

    def get_control_state(self) -> dict:
        with self._state_lock:
            return self._state.to_dict()

    def get_last_frame(self) -> Optional[bytes]:
        with self._stats_lock:
            return self._last_frame

    def get_stats(self) -> CommsStats:
        with self._stats_lock:
            return CommsStats(
                tx_frames_ok=self._stats.tx_frames_ok,
                tx_errors=self._stats.tx_errors,
                commands_accepted=self._stats.commands_accepted,
                commands_dropped=self._stats.commands_dropped,
            )

    def _request_command(self, command: DroneCommand) -> None:
        # Un solo comando discreto en el aire; el resto se descarta.
        with self._state_lock:
            busy = self._state.command_active
            if not busy:
                self._state.active_command = command
                timer = threading.Timer(self.pulse_s, self._clear_command)
                timer.daemon = True
                self._pulse_timer = timer
                timer.start()

        with self._stats_lock:
            if busy:
                self._stats.commands_dropped += 1
            else:
                self._stats.commands_accepted += 1

        if busy:
            logger.debug("command 0x%02X dropped, slot busy", int(command))
        else:
            logger.info("command %s (0x%02X) for %.0f ms", command.name, int(command), self.pulse_s * 1000.0)

    def _clear_command(self) -> None:
        with self._state_lock:
            # Corre en el hilo del Timer; si close() lo canceló, ya no es el vigente.
            if self._pulse_timer is not threading.current_thread():
                return
            self._state.active_command = DroneCommand.NONE
            self._pulse_timer = None

    def _state_snapshot(self) -> ControlState:
        with self._state_lock:
            return ControlState(**self._state.to_dict())

    def _write_current_frame(self) -> None:
        state = self._state_snapshot()
        frame = encode_frame(state)
        try:
            self._sender.send(frame)
        except Exception as exc:
            with self._stats_lock:
                self._stats.tx_errors += 1
            self._error_streak += 1
            if self._error_streak == 1:
                logger.warning("send to %s:%d failed: %s", self.host, self.port, exc)
            else:
                logger.debug("send failed (%d in a row): %s", self._error_streak, exc)
            return

        if self._error_streak:
            logger.info("send recovered after %d errors", self._error_streak)
            self._error_streak = 0
        with self._stats_lock:
            self._stats.tx_frames_ok += 1
            self._last_frame = frame
        if self._log_enabled:
            logger.info("[TX] %s", frame.hex(" "))

    def _tx_loop(self, stop_event: threading.Event) -> None:
        next_tick = time.monotonic() + self.tx_period_s
        while not stop_event.wait(max(0.0, next_tick - time.monotonic())):
            self._write_current_frame()
            next_tick += self.tx_period_s
            now = time.monotonic()
            if next_tick < now - self.tx_period_s:
                next_tick = now + self.tx_period_s
