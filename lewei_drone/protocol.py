from __future__ import annotations

from dataclasses import dataclass

from .controller import NEUTRAL, ControlState, DroneCommand, clamp_axis

HEADER = 0x66
TRAILER = 0x99
FRAME_SIZE = 8
RESERVED = 0x00


def axis_checksum(*axes: int) -> int:
    checksum = 0x00
    for axis in axes:
        checksum ^= axis & 0xFF
    return checksum


def encode_frame(state: ControlState) -> bytes:
    """Serialize a control state into the 8-byte datagram the drone expects.

    While a discrete command occupies the slot the axes are sent as neutral
    and the command code fills both the reserved and the checksum bytes.
    """
    command = int(state.active_command) & 0xFF

    frame = bytearray(FRAME_SIZE)
    frame[0] = HEADER
    if command == DroneCommand.NONE:
        axes = (
            clamp_axis(state.left_right),
            clamp_axis(state.forward_backward),
            clamp_axis(state.throttle),
            clamp_axis(state.turn),
        )
        frame[1:5] = bytes(axes)
        frame[5] = RESERVED
        frame[6] = axis_checksum(*axes)
    else:
        frame[1:5] = bytes((NEUTRAL,) * 4)
        frame[5] = command
        frame[6] = command
    frame[7] = TRAILER
    return bytes(frame)


@dataclass(slots=True, frozen=True)
class DroneFrame:
    left_right: int
    forward_backward: int
    throttle: int
    turn: int
    command: int

    @property
    def is_command(self) -> bool:
        return self.command != DroneCommand.NONE

    def as_dict(self) -> dict:
        return {
            "left_right": self.left_right,
            "forward_backward": self.forward_backward,
            "throttle": self.throttle,
            "turn": self.turn,
            "command": self.command,
        }


def decode_frame(frame: bytes) -> DroneFrame:
    if len(frame) != FRAME_SIZE:
        raise ValueError(f"Invalid frame length: {len(frame)}")
    if frame[0] != HEADER:
        raise ValueError(f"Invalid frame header: 0x{frame[0]:02X}")
    if frame[7] != TRAILER:
        raise ValueError(f"Invalid frame trailer: 0x{frame[7]:02X}")

    if frame[5] == RESERVED:
        expected = axis_checksum(*frame[1:5])
        if frame[6] != expected:
            raise ValueError(
                f"Invalid frame checksum: got 0x{frame[6]:02X}, expected 0x{expected:02X}"
            )
        return DroneFrame(
            left_right=frame[1],
            forward_backward=frame[2],
            throttle=frame[3],
            turn=frame[4],
            command=DroneCommand.NONE,
        )

    if frame[5] != frame[6]:
        raise ValueError(
            f"Command bytes mismatch: 0x{frame[5]:02X} != 0x{frame[6]:02X}"
        )
    return DroneFrame(
        left_right=frame[1],
        forward_backward=frame[2],
        throttle=frame[3],
        turn=frame[4],
        command=frame[5],
    )
