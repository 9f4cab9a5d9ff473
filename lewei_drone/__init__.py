from .config import DroneConfig, load_config
from .controller import ControlState, DroneCommand
from .protocol import decode_frame, encode_frame
from .transport import CommsStats, DroneClient, UdpSender

__all__ = [
    "CommsStats",
    "ControlState",
    "DroneClient",
    "DroneCommand",
    "DroneConfig",
    "UdpSender",
    "decode_frame",
    "encode_frame",
    "load_config",
]
