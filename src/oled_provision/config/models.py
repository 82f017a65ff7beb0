"""Declarative configuration models for a provisioning run.

The models carry no behaviour that touches the system; the pipelines consume
them together with a :class:`~oled_provision.system.base.SystemEnvironment`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Mapping

from ..services.modes import DEFAULT_SERVICE_NAMES, DeviceMode
from ..utils.errors import ValidationError

RESTART_POLICIES = (
    "no",
    "always",
    "on-success",
    "on-failure",
    "on-abnormal",
    "on-abort",
    "on-watchdog",
)


@dataclass(slots=True)
class PythonSettings:
    """Interpreter requirements and the OS packages that satisfy them."""

    command: str = "python3"
    minimum_version: tuple[int, int] = (3, 7)
    install_packages: tuple[str, ...] = ("python3", "python3-pip", "python3-setuptools")
    pip_packages: tuple[str, ...] = ("python3-pip", "python3-setuptools")
    alternative_link: str = "/usr/bin/python"
    alternative_priority: int = 2


@dataclass(slots=True)
class LibraryRequirement:
    """A Python library that must be importable inside the virtual environment.

    Args:
        module: Import name probed to decide whether installation is needed.
        distributions: Names handed to ``pip install --upgrade``.
        system_packages: OS packages installed through apt beforehand.
    """

    module: str
    distributions: tuple[str, ...]
    system_packages: tuple[str, ...] = ()


@dataclass(slots=True)
class InterfaceCommand:
    """One ``raspi-config nonint`` invocation."""

    label: str
    function: str
    value: int = 0

    def argv(self) -> tuple[str, ...]:
        """Arguments passed after ``raspi-config``."""
        return ("nonint", self.function, str(self.value))


@dataclass(slots=True)
class ServiceSettings:
    """Where unit files go and how entry-point scripts are located."""

    unit_dir: Path = Path("/etc/systemd/system")
    home_root: Path = Path("/home")
    script_name: str = "main.py"
    restart: str = "always"
    names: Mapping[DeviceMode, str] = field(default_factory=lambda: dict(DEFAULT_SERVICE_NAMES))

    def service_name(self, mode: DeviceMode) -> str:
        """Return the systemd service name bound to ``mode``."""
        return self.names[mode]

    def script_path(self, username: str, mode: DeviceMode) -> Path:
        """Return ``<home_root>/<username>/<service>/<script_name>``."""
        return self.home_root / username / self.service_name(mode) / self.script_name

    def unit_path(self, service_name: str) -> Path:
        """Return the unit file location for ``service_name``."""
        return self.unit_dir / f"{service_name}.service"


def default_libraries() -> tuple[LibraryRequirement, ...]:
    return (
        LibraryRequirement(
            module="board",
            distributions=("RPi.GPIO", "adafruit-blinka"),
            system_packages=("i2c-tools", "libgpiod-dev", "python3-libgpiod"),
        ),
        LibraryRequirement(
            module="adafruit_ssd1306",
            distributions=("adafruit-circuitpython-ssd1306",),
        ),
        LibraryRequirement(module="PIL", distributions=("pillow",)),
        LibraryRequirement(module="psutil", distributions=("psutil",)),
    )


def default_interfaces() -> tuple[InterfaceCommand, ...]:
    return (
        InterfaceCommand("I2C", "do_i2c"),
        InterfaceCommand("SPI", "do_spi"),
        InterfaceCommand("Serial", "do_serial_hw"),
        InterfaceCommand("SSH", "do_ssh"),
        InterfaceCommand("Camera", "do_camera"),
        InterfaceCommand("Disable raspi-config at boot", "disable_raspi_config_at_boot"),
    )


@dataclass(slots=True)
class ProvisionConfig:
    """Top-level configuration assembled from YAML or the packaged defaults."""

    python: PythonSettings = field(default_factory=PythonSettings)
    venv_dir: Path = Path("/opt/oled-display/venv")
    libraries: tuple[LibraryRequirement, ...] = field(default_factory=default_libraries)
    interfaces: tuple[InterfaceCommand, ...] = field(default_factory=default_interfaces)
    services: ServiceSettings = field(default_factory=ServiceSettings)

    @property
    def venv_python(self) -> Path:
        """Interpreter inside the virtual environment used by the services."""
        return self.venv_dir / "bin" / "python3"

    def system_packages(self) -> tuple[str, ...]:
        """All OS packages declared by library requirements, in manifest order."""
        seen: dict[str, None] = {}
        for requirement in self.libraries:
            for package in requirement.system_packages:
                seen.setdefault(package, None)
        return tuple(seen)

    def validate(self) -> None:
        """Check cross-field constraints that the loader cannot express."""
        if self.services.restart not in RESTART_POLICIES:
            raise ValidationError(
                f"Unsupported restart policy '{self.services.restart}'; "
                f"expected one of {', '.join(RESTART_POLICIES)}"
            )
        missing = [mode.value for mode in DeviceMode if mode not in self.services.names]
        if missing:
            raise ValidationError(f"No service name configured for mode(s): {missing}")
        names = list(self.services.names.values())
        if len(set(names)) != len(names):
            raise ValidationError("Each mode must map to a distinct service name")
        if not self.venv_dir.is_absolute():
            raise ValidationError(f"venv directory must be absolute, got '{self.venv_dir}'")
        if PurePosixPath(self.services.script_name).name != self.services.script_name:
            raise ValidationError("script_name must be a bare file name")
        modules = [requirement.module for requirement in self.libraries]
        if len(set(modules)) != len(modules):
            raise ValidationError("Library requirements contain duplicate modules")
