import json

import pytest

from lewei_drone import cli
from lewei_drone.cli import SessionLogger, build_arg_parser, execute_command
from lewei_drone.controller import DroneCommand
from lewei_drone.transport import DroneClient


def test_arg_parser_defaults_are_none() -> None:
    args = build_arg_parser().parse_args([])

    assert args.host is None
    assert args.port is None
    assert args.tx_hz is None
    assert args.debug is False


def test_arg_parser_overrides() -> None:
    args = build_arg_parser().parse_args(["--host", "10.1.1.1", "--port", "6000", "--tx-hz", "30", "--debug"])

    assert args.host == "10.1.1.1"
    assert args.port == 6000
    assert args.tx_hz == 30.0
    assert args.debug is True


def test_axis_commands(sender) -> None:
    client = DroneClient(sender=sender)

    assert execute_command(client, "throttle 300") == "throttle=255"
    assert execute_command(client, "pitch 10") == "pitch=10"
    assert execute_command(client, "roll 20") == "roll=20"
    assert execute_command(client, "turn 30") == "turn=30"
    assert client.get_control_state()["forward_backward"] == 10

    execute_command(client, "center")
    assert client.throttle == 128


def test_axis_command_bad_input_raises(sender) -> None:
    client = DroneClient(sender=sender)

    with pytest.raises(ValueError):
        execute_command(client, "throttle")
    with pytest.raises(ValueError):
        execute_command(client, "throttle alto")


def test_discrete_command(sender) -> None:
    client = DroneClient(sender=sender)

    out = execute_command(client, "calibrate")
    assert "CALIBRATE_GYRO" in out
    assert client.active_command == DroneCommand.CALIBRATE_GYRO
    client.close()


def test_on_off_and_status(sender) -> None:
    client = DroneClient(sender=sender)

    assert execute_command(client, "on") == "tx=on"
    assert client.enabled is True
    assert "tx=on" in execute_command(client, "status")
    assert execute_command(client, "off") == "tx=off"
    assert client.enabled is False


def test_last_without_frames(sender) -> None:
    client = DroneClient(sender=sender)

    assert execute_command(client, "last") == "last: N/A"


def test_unknown_command(sender) -> None:
    client = DroneClient(sender=sender)

    assert "no reconocido" in execute_command(client, "flip")


def test_session_logger_writes_jsonl(tmp_path) -> None:
    path = tmp_path / "logs" / "session.jsonl"
    session = SessionLogger(str(path))
    session.write(event="command", command="takeoff", state={"throttle": 128})
    session.close()

    record = json.loads(path.read_text(encoding="utf-8").strip())
    assert record["command"] == "takeoff"
    assert record["state"] == {"throttle": 128}


def test_run_cli_with_bad_config_returns_error(tmp_path) -> None:
    path = tmp_path / "drone.yaml"
    path.write_text("port: 0\n", encoding="utf-8")
    args = build_arg_parser().parse_args(["--config", str(path)])

    assert cli.run_cli(args) == 2


@pytest.mark.parametrize("raw", ["", "   "])
def test_empty_line_raises_value_error(sender, raw) -> None:
    client = DroneClient(sender=sender)

    with pytest.raises(ValueError, match="vacío"):
        execute_command(client, raw)


def test_main_entry_point_with_bad_config(tmp_path) -> None:
    from lewei_drone.__main__ import main

    path = tmp_path / "drone.yaml"
    path.write_text("tx_hz: -2\n", encoding="utf-8")

    assert main(["--config", str(path)]) == 2
