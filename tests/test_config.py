import pytest

from lewei_drone.config import DroneConfig, load_config


def test_defaults_without_file() -> None:
    config = load_config(None)

    assert config == DroneConfig()
    assert config.host == "192.168.0.1"
    assert config.port == 50000


def test_missing_file_uses_defaults(tmp_path) -> None:
    config = load_config(str(tmp_path / "nope.yaml"))

    assert config == DroneConfig()


def test_yaml_file_and_overrides(tmp_path) -> None:
    path = tmp_path / "drone.yaml"
    path.write_text("host: 10.0.0.5\nport: 4000\ntx_hz: 25\n", encoding="utf-8")

    config = load_config(str(path), {"port": 5001, "host": None})

    assert config.host == "10.0.0.5"
    assert config.port == 5001
    assert config.tx_hz == 25.0
    assert config.pulse_s == 0.5


def test_unknown_key_raises(tmp_path) -> None:
    path = tmp_path / "drone.yaml"
    path.write_text("hostname: 10.0.0.5\n", encoding="utf-8")

    with pytest.raises(ValueError, match="unknown config keys"):
        load_config(str(path))


@pytest.mark.parametrize(
    "overrides",
    [{"port": 0}, {"port": "abc"}, {"tx_hz": 0}, {"pulse_s": -0.1}],
)
def test_invalid_values_raise(overrides) -> None:
    with pytest.raises(ValueError):
        load_config(None, overrides)


def test_non_mapping_file_raises(tmp_path) -> None:
    path = tmp_path / "drone.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")

    with pytest.raises(ValueError, match="mapping"):
        load_config(str(path))
