from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


NEUTRAL = 0x80
AXIS_MIN = 0x00
AXIS_MAX = 0xFF


class DroneCommand(IntEnum):
    NONE = 0x00
    TAKE_OFF = 0x01
    UNLOCK_MOTOR = 0x40
    CALIBRATE_GYRO = 0x80

    # El firmware usa el mismo codigo para despegar y aterrizar.
    LAND = 0x01


def clamp_axis(value: int) -> int:
    return max(AXIS_MIN, min(AXIS_MAX, int(value)))


@dataclass(slots=True)
class ControlState:
    throttle: int = NEUTRAL
    turn: int = NEUTRAL
    forward_backward: int = NEUTRAL
    left_right: int = NEUTRAL
    active_command: int = DroneCommand.NONE

    def set_throttle(self, value: int) -> int:
        clamped = clamp_axis(value)
        self.throttle = clamped
        return clamped

    def set_turn(self, value: int) -> int:
        clamped = clamp_axis(value)
        self.turn = clamped
        return clamped

    def set_forward_backward(self, value: int) -> int:
        clamped = clamp_axis(value)
        self.forward_backward = clamped
        return clamped

    def set_left_right(self, value: int) -> int:
        clamped = clamp_axis(value)
        self.left_right = clamped
        return clamped

    @property
    def command_active(self) -> bool:
        return self.active_command != DroneCommand.NONE

    def center(self) -> None:
        self.throttle = NEUTRAL
        self.turn = NEUTRAL
        self.forward_backward = NEUTRAL
        self.left_right = NEUTRAL

    def to_dict(self) -> dict:
        return {
            "throttle": self.throttle,
            "turn": self.turn,
            "forward_backward": self.forward_backward,
            "left_right": self.left_right,
            "active_command": int(self.active_command),
        }
