"""Tests covering interface enabling, service activation and reboot."""

from __future__ import annotations

from pathlib import Path

import pytest

from oled_provision.pipelines.activation import ServiceActivator
from oled_provision.pipelines.interfaces import InterfaceEnabler
from oled_provision.pipelines.prompts import confirm
from oled_provision.pipelines.reboot import RebootPrompter
from oled_provision.system.base import ServiceState
from oled_provision.system.mock import (
    MockFileSystem,
    MockInterfaceConfigurator,
    MockPowerControl,
    MockServiceManager,
    ScriptedPrompter,
)
from oled_provision.utils.errors import ExternalToolError, ValidationError

MH = "oled-motherhub"
DB = "oled-daughterbox"
UNIT_DIR = Path("/etc/systemd/system")


@pytest.fixture
def services() -> MockServiceManager:
    """Service manager whose unit files have already been written."""
    files = MockFileSystem()
    for name in (MH, DB):
        files.install_file(UNIT_DIR / f"{name}.service", "[Unit]\n")
    return MockServiceManager(files=files)


def test_interfaces_enabled_in_manifest_order(config) -> None:
    configurator = MockInterfaceConfigurator()
    applied = InterfaceEnabler(configurator, config.interfaces).run()
    assert applied == [
        "do_i2c",
        "do_spi",
        "do_serial_hw",
        "do_ssh",
        "do_camera",
        "disable_raspi_config_at_boot",
    ]
    assert configurator.calls[0] == ("nonint", "do_i2c", "0")
    assert configurator.calls[-1] == ("nonint", "disable_raspi_config_at_boot", "0")


def test_interface_failure_is_fatal(config) -> None:
    configurator = MockInterfaceConfigurator(fail_on={"do_camera"})
    with pytest.raises(ExternalToolError, match="raspi-config"):
        InterfaceEnabler(configurator, config.interfaces).run()
    assert len(configurator.calls) == 5


def test_services_start_unknown(services: MockServiceManager) -> None:
    assert services.state(MH) is ServiceState.UNKNOWN
    assert services.state(DB) is ServiceState.UNKNOWN


@pytest.mark.parametrize("selected, other", [(MH, DB), (DB, MH)])
def test_activation_leaves_exactly_one_service_active(
    services: MockServiceManager, selected: str, other: str
) -> None:
    states = ServiceActivator(services).activate(selected, [MH, DB])
    assert states == {selected: ServiceState.ACTIVE, other: ServiceState.DISABLED}
    assert services.calls == [
        ("daemon-reload",),
        ("disable", MH),
        ("disable", DB),
        ("enable", selected),
    ]


def test_switching_modes_disables_previous_service(services: MockServiceManager) -> None:
    activator = ServiceActivator(services)
    activator.activate(MH, [MH, DB])
    states = activator.activate(DB, [MH, DB])
    assert states == {MH: ServiceState.DISABLED, DB: ServiceState.ACTIVE}


def test_unknown_selection_rejected_before_any_call(services: MockServiceManager) -> None:
    with pytest.raises(ValidationError):
        ServiceActivator(services).activate("oled-mh", [MH, DB])
    assert services.calls == []
    assert services.state(MH) is ServiceState.UNKNOWN


def test_activation_without_unit_files_fails() -> None:
    services = MockServiceManager()
    with pytest.raises(ExternalToolError, match="does not exist"):
        ServiceActivator(services).activate(MH, [MH, DB])


@pytest.mark.parametrize(
    "answer, expected",
    [("", True), ("Y", True), ("yes", True), ("n", False), ("No", False), ("maybe", False)],
)
def test_confirm_defaults_to_yes(answer: str, expected: bool) -> None:
    prompter = ScriptedPrompter([answer])
    assert confirm(prompter, "Proceed?") is expected
    assert prompter.questions == ["Proceed? [Y/n]: "]


def test_reboot_on_empty_answer() -> None:
    power = MockPowerControl()
    assert RebootPrompter(power, ScriptedPrompter([""])).run()
    assert power.reboots == 1


def test_reboot_declined_prints_reminder(caplog) -> None:
    caplog.set_level("INFO")
    power = MockPowerControl()
    assert not RebootPrompter(power, ScriptedPrompter(["n"])).run()
    assert power.reboots == 0
    assert "reboot later" in caplog.text


def test_reboot_prompt_skipped() -> None:
    power = MockPowerControl()
    prompter = ScriptedPrompter(["y"])
    assert not RebootPrompter(power, prompter).run(ask=False)
    assert prompter.questions == []
    assert power.reboots == 0
