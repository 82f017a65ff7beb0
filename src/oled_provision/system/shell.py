"""Shell-backed implementations of the system tool interfaces."""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from ..utils.errors import ExternalToolError
from .base import (
    FileSystem,
    InterfaceConfigurator,
    PackageManager,
    PowerControl,
    PythonToolchain,
    ServiceManager,
    ServiceState,
    SystemEnvironment,
)

LOGGER = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127


@dataclass(slots=True)
class CommandResult:
    """Outcome of a finished external command."""

    argv: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Run external commands, escalating through ``sudo`` when not root."""

    def __init__(self, *, use_sudo: bool | None = None, timeout: float | None = None) -> None:
        """Create a runner.

        Args:
            use_sudo: Prefix privileged commands with ``sudo``. Defaults to
                ``True`` unless the process already runs as root.
            timeout: Optional per-command timeout in seconds.
        """
        if use_sudo is None:
            use_sudo = os.geteuid() != 0
        self.use_sudo = bool(use_sudo)
        self.timeout = timeout

    def run(
        self,
        argv: Sequence[str],
        *,
        privileged: bool = False,
        check: bool = True,
    ) -> CommandResult:
        """Execute ``argv`` and wait for it to finish.

        Args:
            argv: Command and arguments.
            privileged: Whether the command needs root.
            check: Raise :class:`ExternalToolError` on a non-zero exit.

        Returns:
            CommandResult: Captured exit status and output.

        Raises:
            ExternalToolError: When ``check`` is set and the command fails, or
                the command cannot be started at all.
        """
        cmd = [str(arg) for arg in argv]
        if privileged and self.use_sudo:
            cmd = ["sudo", *cmd]
        LOGGER.debug("Running: %s", shlex.join(cmd))
        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError:
            result = CommandResult(tuple(cmd), COMMAND_NOT_FOUND, "", f"{cmd[0]}: command not found")
        except subprocess.TimeoutExpired:
            raise ExternalToolError(cmd, -1, f"timed out after {self.timeout} seconds") from None
        else:
            result = CommandResult(
                tuple(cmd), completed.returncode, completed.stdout or "", completed.stderr or ""
            )
        if result.stdout.strip():
            LOGGER.debug("%s stdout: %s", cmd[0], result.stdout.strip())
        if check and not result.ok:
            raise ExternalToolError(cmd, result.returncode, result.stderr or result.stdout)
        return result


class AptPackageManager(PackageManager):
    """apt/dpkg front end."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def is_installed(self, package: str) -> bool:
        result = self._runner.run(
            ["dpkg-query", "-W", "-f=${Status}", package], check=False
        )
        return result.ok and "install ok installed" in result.stdout

    def update(self) -> None:
        self._runner.run(["apt-get", "update", "--allow-releaseinfo-change"], privileged=True)

    def install(self, packages: Sequence[str], *, upgrade: bool = False) -> None:
        if not packages:
            return
        argv = ["apt-get", "install"]
        if upgrade:
            argv.append("--upgrade")
        argv.extend(["-y", *packages])
        self._runner.run(argv, privileged=True)


class ShellPythonToolchain(PythonToolchain):
    """Interpreter probes and pip/venv commands."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def version(self, command: str) -> tuple[int, int, int] | None:
        result = self._runner.run(
            [command, "-c", "import platform; print(platform.python_version())"], check=False
        )
        if not result.ok:
            return None
        return parse_version(result.stdout)

    def pip_available(self) -> bool:
        return shutil.which("pip3") is not None

    def interpreter_exists(self, interpreter: Path) -> bool:
        path = Path(interpreter)
        return path.is_file() and os.access(path, os.X_OK)

    def module_available(self, interpreter: Path, module: str) -> bool:
        if not self.interpreter_exists(interpreter):
            return False
        return self._runner.run([str(interpreter), "-c", f"import {module}"], check=False).ok

    def create_venv(self, command: str, venv_dir: Path) -> None:
        self._runner.run([command, "-m", "venv", str(venv_dir)], privileged=True)

    def pip_install(self, interpreter: Path, distributions: Sequence[str]) -> None:
        self._runner.run(
            [str(interpreter), "-m", "pip", "install", "--upgrade", *distributions],
            privileged=True,
        )

    def register_default(self, link: str, command: str, priority: int) -> None:
        target = shutil.which(command) or command
        self._runner.run(
            ["update-alternatives", "--install", link, "python", target, str(priority)],
            privileged=True,
        )
        self._runner.run(["update-alternatives", "--set", "python", target], privileged=True)


class RaspiConfig(InterfaceConfigurator):
    """``raspi-config`` in non-interactive mode."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def apply(self, arguments: Sequence[str]) -> None:
        self._runner.run(["raspi-config", *arguments], privileged=True)


class Systemctl(ServiceManager):
    """System-level ``systemctl`` commands."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def daemon_reload(self) -> None:
        self._runner.run(["systemctl", "daemon-reload"], privileged=True)

    def disable(self, name: str, *, now: bool = True) -> None:
        argv = ["systemctl", "disable", name]
        if now:
            argv.append("--now")
        self._runner.run(argv, privileged=True)

    def enable(self, name: str, *, now: bool = True) -> None:
        argv = ["systemctl", "enable", name]
        if now:
            argv.append("--now")
        self._runner.run(argv, privileged=True)

    def state(self, name: str) -> ServiceState:
        enabled = self._runner.run(["systemctl", "is-enabled", name], check=False)
        enabled_state = enabled.stdout.strip()
        if not enabled_state or enabled_state == "not-found":
            return ServiceState.UNKNOWN
        active = self._runner.run(["systemctl", "is-active", name], check=False)
        if enabled_state == "enabled" and active.stdout.strip() == "active":
            return ServiceState.ACTIVE
        return ServiceState.DISABLED


class LocalFileSystem(FileSystem):
    """Writes files directly as root, or through ``install(1)`` under sudo."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def is_file(self, path: Path) -> bool:
        return Path(path).is_file()

    def install_file(self, path: Path, content: str, *, mode: int = 0o644, owner: str = "root") -> None:
        target = Path(path)
        if not self._runner.use_sudo:
            target.write_text(content, encoding="utf-8")
            os.chmod(target, mode)
            shutil.chown(target, user=owner, group=owner)
            return
        with tempfile.NamedTemporaryFile("w", encoding="utf-8", suffix=".tmp", delete=False) as handle:
            handle.write(content)
            staged = Path(handle.name)
        try:
            self._runner.run(
                ["install", "-m", format(mode, "04o"), "-o", owner, "-g", owner, str(staged), str(target)],
                privileged=True,
            )
        finally:
            staged.unlink(missing_ok=True)


class SystemPower(PowerControl):
    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def reboot(self) -> None:
        self._runner.run(["reboot"], privileged=True)


def parse_version(text: str) -> tuple[int, int, int] | None:
    """Parse ``X.Y.Z`` (trailing tags ignored) into a tuple of ints."""
    parts: list[int] = []
    for chunk in text.strip().split(".")[:3]:
        digits = ""
        for char in chunk:
            if not char.isdigit():
                break
            digits += char
        if not digits:
            break
        parts.append(int(digits))
    if len(parts) < 2:
        return None
    while len(parts) < 3:
        parts.append(0)
    return parts[0], parts[1], parts[2]


def shell_environment(runner: CommandRunner | None = None) -> SystemEnvironment:
    """Assemble a :class:`SystemEnvironment` that drives the real machine."""
    runner = runner or CommandRunner()
    return SystemEnvironment(
        packages=AptPackageManager(runner),
        python=ShellPythonToolchain(runner),
        interfaces=RaspiConfig(runner),
        services=Systemctl(runner),
        files=LocalFileSystem(runner),
        power=SystemPower(runner),
    )
