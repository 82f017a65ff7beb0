"""Tests covering the command line entry point and its exit codes."""

from __future__ import annotations

from pathlib import Path

from oled_provision.cli import EXIT_FAILURE, EXIT_OK, EXIT_UNEXPECTED, main
from oled_provision.system.base import ServiceState
from oled_provision.system.mock import (
    MockPowerControl,
    ScriptedPrompter,
    mock_environment,
    mutating_calls,
)


class _BrokenPower(MockPowerControl):
    def reboot(self) -> None:
        raise RuntimeError("power controller offline")


def test_interactive_run_succeeds(scripts) -> None:
    env = mock_environment(scripts=scripts)
    prompter = ScriptedPrompter(["pi", "mh", "n"])
    assert main([], env=env, prompter=prompter) == EXIT_OK
    assert env.services.state("oled-motherhub") is ServiceState.ACTIVE
    assert len(prompter.questions) == 3


def test_flags_skip_prompts(scripts) -> None:
    env = mock_environment(scripts=scripts)
    prompter = ScriptedPrompter()
    code = main(["--username", "pi", "--mode", "db", "--no-reboot"], env=env, prompter=prompter)
    assert code == EXIT_OK
    assert prompter.questions == []
    assert env.services.state("oled-daughterbox") is ServiceState.ACTIVE
    assert env.power.reboots == 0


def test_invalid_mode_exits_one_without_changes(scripts, caplog) -> None:
    caplog.set_level("INFO")
    env = mock_environment(scripts=scripts)
    code = main([], env=env, prompter=ScriptedPrompter(["pi", "xx"]))
    assert code == EXIT_FAILURE
    assert "Invalid mode" in caplog.text
    assert env.files.written == {}
    assert mutating_calls(env) == []


def test_missing_script_exits_one(scripts, caplog) -> None:
    env = mock_environment(scripts=scripts[:1])
    code = main(["--username", "pi", "--mode", "mh"], env=env, prompter=ScriptedPrompter())
    assert code == EXIT_FAILURE
    assert "not found" in caplog.text
    assert env.files.written == {}


def test_external_tool_failure_exits_one(scripts, caplog) -> None:
    env = mock_environment(scripts=scripts)
    env.interfaces.fail_on = {"do_spi"}
    code = main(["--username", "pi", "--mode", "mh"], env=env, prompter=ScriptedPrompter())
    assert code == EXIT_FAILURE
    assert "raspi-config nonint do_spi 0" in caplog.text
    assert env.files.written == {}


def test_missing_config_exits_one(tmp_path: Path, scripts) -> None:
    env = mock_environment(scripts=scripts)
    code = main(
        ["--config", str(tmp_path / "absent.yaml"), "--username", "pi", "--mode", "mh"],
        env=env,
        prompter=ScriptedPrompter(),
    )
    assert code == EXIT_FAILURE
    assert mutating_calls(env) == []


def test_custom_config_is_used(tmp_path: Path, scripts) -> None:
    profile = tmp_path / "profile.yaml"
    profile.write_text("services:\n  unit_dir: /run/systemd/system\n")
    env = mock_environment(scripts=scripts)
    code = main(
        ["--config", str(profile), "--username", "pi", "--mode", "mh", "--no-reboot"],
        env=env,
        prompter=ScriptedPrompter(),
    )
    assert code == EXIT_OK
    assert Path("/run/systemd/system/oled-motherhub.service") in env.files.written


def test_unexpected_error_exits_two(scripts) -> None:
    env = mock_environment(scripts=scripts)
    env.power = _BrokenPower()
    code = main(["--username", "pi", "--mode", "mh"], env=env, prompter=ScriptedPrompter([""]))
    assert code == EXIT_UNEXPECTED


def test_malformed_interface_value_exits_one(tmp_path: Path, scripts, caplog) -> None:
    profile = tmp_path / "profile.yaml"
    profile.write_text("interfaces:\n  - function: do_i2c\n    value: on\n")
    env = mock_environment(scripts=scripts)
    code = main(
        ["--config", str(profile), "--username", "pi", "--mode", "mh", "--no-reboot"],
        env=env,
        prompter=ScriptedPrompter(),
    )
    assert code == EXIT_FAILURE
    assert "interfaces[0].value" in caplog.text
    assert mutating_calls(env) == []
