"""End-to-end provisioning run: preflight, install, configure, activate."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..config.models import ProvisionConfig
from ..services.modes import DeviceMode
from ..services.unit import ServiceDescriptor, UnitGenerator
from ..system.base import ServiceState, SystemEnvironment
from ..utils.errors import ValidationError
from .activation import ServiceActivator
from .install import InstallReport, PackageInstaller
from .interfaces import InterfaceEnabler
from .probe import EnvironmentProber, ProbeReport
from .prompts import Prompter
from .reboot import RebootPrompter

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProvisionRequest:
    """Validated operator input for one run."""

    username: str
    mode: DeviceMode


@dataclass(slots=True)
class ProvisionResult:
    """Summary of a completed run."""

    request: ProvisionRequest
    selected_service: str
    probe: ProbeReport
    install: InstallReport
    interfaces: list[str] = field(default_factory=list)
    unit_files: list[Path] = field(default_factory=list)
    service_states: dict[str, ServiceState] = field(default_factory=dict)
    rebooted: bool = False


def validate_username(raw: str) -> str:
    """Return the trimmed username or raise :class:`ValidationError`."""
    username = (raw or "").strip()
    if not username:
        raise ValidationError("Username must not be empty")
    if any(char.isspace() for char in username):
        raise ValidationError(f"Username '{username}' must not contain whitespace")
    if "/" in username or username in (".", ".."):
        raise ValidationError(f"Invalid username '{username}'")
    return username


def collect_request(
    prompter: Prompter,
    *,
    username: str | None = None,
    mode: str | None = None,
) -> ProvisionRequest:
    """Prompt for any input not supplied up front and validate it.

    Args:
        prompter: Source of operator answers.
        username: Pre-supplied username; prompted for when ``None``.
        mode: Pre-supplied mode token; prompted for when ``None``.

    Raises:
        ValidationError: On an empty username or an unrecognised mode.
    """
    if username is None:
        username = prompter.ask("Enter the username of the system (e.g., pi): ")
    user = validate_username(username)
    if mode is None:
        mode = prompter.ask("Enter the mode of the device (mh/db): ")
    return ProvisionRequest(username=user, mode=DeviceMode.from_token(mode))


class Provisioner:
    """Run every provisioning step in order against a :class:`SystemEnvironment`."""

    def __init__(self, env: SystemEnvironment, config: ProvisionConfig, prompter: Prompter) -> None:
        self._env = env
        self._config = config
        self._prompter = prompter
        self._units = UnitGenerator(env.files)

    def descriptors(self, username: str) -> list[ServiceDescriptor]:
        """Build the unit descriptors for every mode, in mode order."""
        services = self._config.services
        descriptors: list[ServiceDescriptor] = []
        for mode in DeviceMode:
            name = services.service_name(mode)
            descriptors.append(
                ServiceDescriptor(
                    name=name,
                    script_path=services.script_path(username, mode),
                    interpreter=self._config.venv_python,
                    unit_path=services.unit_path(name),
                    restart=services.restart,
                )
            )
        return descriptors

    def preflight(self, request: ProvisionRequest) -> list[ServiceDescriptor]:
        """Check both entry points exist before anything is mutated."""
        descriptors = self.descriptors(request.username)
        self._units.check_scripts(descriptors)
        return descriptors

    def run(self, request: ProvisionRequest, *, offer_reboot: bool = True) -> ProvisionResult:
        """Execute the full pipeline for ``request``.

        Raises:
            ProvisionError: Any subclass aborts the run at the failing step.
        """
        descriptors = self.preflight(request)
        selected = self._config.services.service_name(request.mode)
        LOGGER.info("Provisioning %s (%s) for user %s", request.mode.label, selected, request.username)

        probe = EnvironmentProber(self._env, self._config).probe()
        install = PackageInstaller(self._env, self._config, self._prompter).install(probe)
        interfaces = InterfaceEnabler(self._env.interfaces, self._config.interfaces).run()
        LOGGER.info("Configuration complete. Proceeding to the service configuration for the OLED display.")

        unit_files = self._units.generate_all(descriptors)
        states = ServiceActivator(self._env.services).activate(
            selected, [descriptor.name for descriptor in descriptors]
        )
        LOGGER.info("Service configuration completed successfully")

        result = ProvisionResult(
            request=request,
            selected_service=selected,
            probe=probe,
            install=install,
            interfaces=interfaces,
            unit_files=unit_files,
            service_states=states,
        )
        result.rebooted = RebootPrompter(self._env.power, self._prompter).run(ask=offer_reboot)
        return result
