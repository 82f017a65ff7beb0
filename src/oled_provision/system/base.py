"""Narrow interfaces over the external tools the installer drives.

Each interface exposes one method per command the pipelines use. The shell
implementations live in :mod:`oled_provision.system.shell`; in-memory doubles
for tests live in :mod:`oled_provision.system.mock`.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Sequence


class ServiceState(Enum):
    """Lifecycle of a unit as seen by the service manager."""

    UNKNOWN = "unknown"
    DISABLED = "disabled"
    ACTIVE = "active"


class PackageManager(abc.ABC):
    """OS package manager (apt on Raspberry Pi OS)."""

    @abc.abstractmethod
    def is_installed(self, package: str) -> bool:
        """Return ``True`` when ``package`` is installed."""

    @abc.abstractmethod
    def update(self) -> None:
        """Refresh the package index."""

    @abc.abstractmethod
    def install(self, packages: Sequence[str], *, upgrade: bool = False) -> None:
        """Install ``packages`` non-interactively."""


class PythonToolchain(abc.ABC):
    """Interpreter, pip and virtual environment operations."""

    @abc.abstractmethod
    def version(self, command: str) -> tuple[int, int, int] | None:
        """Return the version of interpreter ``command`` or ``None`` if absent."""

    @abc.abstractmethod
    def pip_available(self) -> bool:
        """Return ``True`` when a system ``pip3`` is on ``PATH``."""

    @abc.abstractmethod
    def interpreter_exists(self, interpreter: Path) -> bool:
        """Return ``True`` when ``interpreter`` is an executable file."""

    @abc.abstractmethod
    def module_available(self, interpreter: Path, module: str) -> bool:
        """Return ``True`` when ``import module`` succeeds under ``interpreter``."""

    @abc.abstractmethod
    def create_venv(self, command: str, venv_dir: Path) -> None:
        """Create a virtual environment at ``venv_dir`` using ``command``."""

    @abc.abstractmethod
    def pip_install(self, interpreter: Path, distributions: Sequence[str]) -> None:
        """Run ``pip install --upgrade`` for ``distributions`` under ``interpreter``."""

    @abc.abstractmethod
    def register_default(self, link: str, command: str, priority: int) -> None:
        """Register ``command`` as the ``python`` alternative and select it."""


class InterfaceConfigurator(abc.ABC):
    """Hardware interface configuration tool (``raspi-config``)."""

    @abc.abstractmethod
    def apply(self, arguments: Sequence[str]) -> None:
        """Run the tool with ``arguments``."""


class ServiceManager(abc.ABC):
    """Service manager CLI (``systemctl``)."""

    @abc.abstractmethod
    def daemon_reload(self) -> None:
        """Make the manager re-read unit files."""

    @abc.abstractmethod
    def disable(self, name: str, *, now: bool = True) -> None:
        """Disable ``name`` and, when ``now`` is set, stop it."""

    @abc.abstractmethod
    def enable(self, name: str, *, now: bool = True) -> None:
        """Enable ``name`` and, when ``now`` is set, start it."""

    @abc.abstractmethod
    def state(self, name: str) -> ServiceState:
        """Report the current state of ``name``."""


class FileSystem(abc.ABC):
    """File operations that need elevated privileges on a real system."""

    @abc.abstractmethod
    def is_file(self, path: Path) -> bool:
        """Return ``True`` if ``path`` is an existing regular file."""

    @abc.abstractmethod
    def install_file(self, path: Path, content: str, *, mode: int = 0o644, owner: str = "root") -> None:
        """Write ``content`` to ``path`` then apply ``mode`` and ``owner:owner``."""


class PowerControl(abc.ABC):
    """Machine power operations."""

    @abc.abstractmethod
    def reboot(self) -> None:
        """Restart the machine."""


@dataclass(slots=True)
class SystemEnvironment:
    """Bundle of tool interfaces handed to every pipeline step."""

    packages: PackageManager
    python: PythonToolchain
    interfaces: InterfaceConfigurator
    services: ServiceManager
    files: FileSystem
    power: PowerControl
