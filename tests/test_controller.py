from lewei_drone.controller import NEUTRAL, ControlState, DroneCommand


def test_defaults_are_neutral() -> None:
    state = ControlState()

    assert state.throttle == NEUTRAL
    assert state.turn == NEUTRAL
    assert state.forward_backward == NEUTRAL
    assert state.left_right == NEUTRAL
    assert state.active_command == DroneCommand.NONE
    assert state.command_active is False


def test_state_clamps() -> None:
    state = ControlState()

    assert state.set_throttle(-5) == 0
    assert state.set_throttle(300) == 255
    assert state.set_turn(256) == 255
    assert state.set_forward_backward(-1) == 0
    assert state.set_left_right(77.9) == 77
    assert state.throttle == 255
    assert state.left_right == 77


def test_center_keeps_command() -> None:
    state = ControlState(throttle=10, turn=20, forward_backward=30, left_right=40, active_command=DroneCommand.TAKE_OFF)
    state.center()

    assert state.to_dict() == {
        "throttle": NEUTRAL,
        "turn": NEUTRAL,
        "forward_backward": NEUTRAL,
        "left_right": NEUTRAL,
        "active_command": 0x01,
    }
