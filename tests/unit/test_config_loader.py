"""Tests covering provisioning profile loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from oled_provision.config import loader
from oled_provision.config import (
    DEFAULT_CONFIG_PATH,
    ProvisionConfig,
    load_provision_config,
)
from oled_provision.services.modes import DeviceMode
from oled_provision.utils.errors import ValidationError


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "profile.yaml"
    path.write_text(text)
    return path


def test_packaged_profile_matches_builtin_defaults() -> None:
    """The shipped YAML and the dataclass defaults describe the same run."""
    assert DEFAULT_CONFIG_PATH.exists()
    assert load_provision_config() == ProvisionConfig()


def test_default_profile_contents() -> None:
    config = load_provision_config()
    assert config.python.minimum_version == (3, 7)
    assert config.venv_python == Path("/opt/oled-display/venv/bin/python3")
    assert [lib.module for lib in config.libraries] == ["board", "adafruit_ssd1306", "PIL", "psutil"]
    assert config.system_packages() == ("i2c-tools", "libgpiod-dev", "python3-libgpiod")
    assert [cmd.function for cmd in config.interfaces] == [
        "do_i2c",
        "do_spi",
        "do_serial_hw",
        "do_ssh",
        "do_camera",
        "disable_raspi_config_at_boot",
    ]
    assert config.services.service_name(DeviceMode.MOTHER_HUB) == "oled-motherhub"
    assert config.services.service_name(DeviceMode.DAUGHTER_BOX) == "oled-daughterbox"
    assert config.services.restart == "always"


def test_script_and_unit_paths() -> None:
    services = ProvisionConfig().services
    assert services.script_path("pi", DeviceMode.MOTHER_HUB) == Path("/home/pi/oled-motherhub/main.py")
    assert services.unit_path("oled-daughterbox") == Path("/etc/systemd/system/oled-daughterbox.service")


def test_partial_override_keeps_other_defaults(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
venv:
  path: /srv/oled/venv
services:
  restart: on-failure
  names:
    db: oled-satellite
""",
    )
    config = load_provision_config(path)
    assert config.venv_dir == Path("/srv/oled/venv")
    assert config.services.restart == "on-failure"
    assert config.services.service_name(DeviceMode.DAUGHTER_BOX) == "oled-satellite"
    assert config.services.service_name(DeviceMode.MOTHER_HUB) == "oled-motherhub"
    assert config.services.unit_dir == Path("/etc/systemd/system")
    assert config.libraries == ProvisionConfig().libraries


def test_minimum_version_parsing(tmp_path: Path) -> None:
    path = _write(tmp_path, 'python:\n  minimum_version: "3.10"\n')
    assert load_provision_config(path).python.minimum_version == (3, 10)


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    assert load_provision_config(_write(tmp_path, "")) == ProvisionConfig()


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_provision_config(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    "text, fragment",
    [
        ("services:\n  restart: sometimes\n", "restart policy"),
        ("services:\n  names:\n    xx: oled-other\n", "Invalid mode"),
        ("services:\n  names:\n    db: oled-motherhub\n", "distinct"),
        ("libraries:\n  - module: psutil\n", "at least one distribution"),
        ("libraries:\n  - distributions: [psutil]\n", "missing 'module'"),
        ("interfaces: do_i2c\n", "must be a list"),
        ("venv:\n  path: relative/venv\n", "absolute"),
        ("- just\n- a list\n", "top-level mapping"),
        ("python: [broken\n", "Could not parse"),
        ("interfaces:\n  - function: do_i2c\n    value: on\n", "must be an integer"),
        ("interfaces:\n  - function: do_i2c\n    value: abc\n", "must be an integer"),
        ("interfaces:\n  - function: do_i2c\n    value: 2\n", "must be one of 0, 1"),
        ("python:\n  alternative_priority: high\n", "alternative_priority"),
        ("python:\n  alternative_priority: true\n", "must be an integer"),
    ],
)
def test_malformed_profiles_raise_validation_error(tmp_path: Path, text: str, fragment: str) -> None:
    with pytest.raises(ValidationError) as excinfo:
        load_provision_config(_write(tmp_path, text))
    assert fragment in str(excinfo.value)


def test_override_sections_fall_back_to_packaged_profile(tmp_path: Path, monkeypatch) -> None:
    """Sections missing from an override come from the shipped YAML, not the dataclasses."""
    packaged = tmp_path / "packaged.yaml"
    packaged.write_text("services:\n  restart: on-failure\ninterfaces:\n  - function: do_i2c\n    value: 0\n")
    monkeypatch.setattr(loader, "DEFAULT_CONFIG_PATH", packaged)
    override = tmp_path / "override.yaml"
    override.write_text("venv:\n  path: /srv/oled/venv\n")

    config = load_provision_config(override)
    assert config.venv_dir == Path("/srv/oled/venv")
    assert config.services.restart == "on-failure"
    assert [cmd.argv() for cmd in config.interfaces] == [("nonint", "do_i2c", "0")]


def test_override_replaces_whole_section(tmp_path: Path) -> None:
    path = _write(tmp_path, "interfaces:\n  - label: I2C\n    function: do_i2c\n    value: 1\n")
    config = load_provision_config(path)
    assert [cmd.argv() for cmd in config.interfaces] == [("nonint", "do_i2c", "1")]
    assert config.libraries == ProvisionConfig().libraries
