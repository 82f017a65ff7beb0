"""Idempotent installation of the interpreter, venv and display libraries."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from ..config.models import LibraryRequirement, ProvisionConfig
from ..system.base import SystemEnvironment
from ..utils.errors import PreconditionError
from .probe import ProbeReport
from .prompts import Prompter, confirm

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class InstallReport:
    """What the installer changed during one pass."""

    index_updated: bool = False
    python_installed: bool = False
    pip_installed: bool = False
    venv_created: bool = False
    system_packages: list[str] = field(default_factory=list)
    libraries: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(
            self.python_installed
            or self.pip_installed
            or self.venv_created
            or self.system_packages
            or self.libraries
        )


class PackageInstaller:
    """Install whatever a :class:`ProbeReport` says is missing.

    Every step is skipped when the probe shows it is already satisfied, so a
    second pass over an unchanged system issues no install commands. Failures
    from the underlying tools propagate as
    :class:`~oled_provision.utils.errors.ExternalToolError`; nothing is rolled
    back.
    """

    def __init__(self, env: SystemEnvironment, config: ProvisionConfig, prompter: Prompter) -> None:
        self._env = env
        self._config = config
        self._prompter = prompter

    def install(self, probe: ProbeReport) -> InstallReport:
        """Bring the system up to the configured manifest.

        Args:
            probe: Fresh probe of the current system.

        Returns:
            InstallReport: Summary of the actions taken.

        Raises:
            PreconditionError: If the interpreter is too old and the operator
                declines to install a newer one.
            ExternalToolError: If any install command fails.
        """
        result = InstallReport()
        self._ensure_python(probe, result)
        self._ensure_pip(probe, result)
        self._ensure_venv(probe, result)
        for requirement in self._config.libraries:
            self._ensure_library(requirement, probe, result)
        if not result.changed:
            LOGGER.info("All requirements already satisfied")
        return result

    def _ensure_python(self, probe: ProbeReport, result: InstallReport) -> None:
        settings = self._config.python
        wanted = ".".join(str(part) for part in settings.minimum_version)
        if probe.python_sufficient:
            LOGGER.info("Sufficient Python version: %s", _format_version(probe.python_version))
            return
        LOGGER.warning(
            "Python version is %s. Python %s+ is required.",
            _format_version(probe.python_version),
            wanted,
        )
        if not confirm(self._prompter, "Do you want to install the required Python version?"):
            raise PreconditionError(f"Python {wanted}+ is required; installation declined")
        LOGGER.info("Installing Python %s+...", wanted)
        self._apt_install(settings.install_packages, result)
        self._env.python.register_default(
            settings.alternative_link, settings.command, settings.alternative_priority
        )
        result.python_installed = True

    def _ensure_pip(self, probe: ProbeReport, result: InstallReport) -> None:
        if probe.pip_available or result.python_installed:
            LOGGER.info("pip is already installed")
            return
        LOGGER.info("Installing pip...")
        self._apt_install(self._config.python.pip_packages, result, upgrade=True)
        result.pip_installed = True

    def _ensure_venv(self, probe: ProbeReport, result: InstallReport) -> None:
        venv_dir = self._config.venv_dir
        if probe.venv_ready:
            LOGGER.info("Virtual environment already exists in %s", venv_dir)
            return
        LOGGER.info("Creating virtual environment in %s...", venv_dir)
        self._env.python.create_venv(self._config.python.command, venv_dir)
        result.venv_created = True

    def _ensure_library(
        self, requirement: LibraryRequirement, probe: ProbeReport, result: InstallReport
    ) -> None:
        if probe.modules.get(requirement.module, False):
            LOGGER.info("%s is already installed", requirement.module)
            return
        missing = [
            package
            for package in requirement.system_packages
            if not probe.system_packages.get(package, False) and package not in result.system_packages
        ]
        if missing:
            self._apt_install(missing, result)
        LOGGER.info("Installing %s...", ", ".join(requirement.distributions))
        self._env.python.pip_install(self._config.venv_python, requirement.distributions)
        result.libraries.append(requirement.module)

    def _apt_install(self, packages: Sequence[str], result: InstallReport, *, upgrade: bool = False) -> None:
        if not packages:
            return
        if not result.index_updated:
            self._env.packages.update()
            result.index_updated = True
        self._env.packages.install(packages, upgrade=upgrade)
        result.system_packages.extend(package for package in packages if package not in result.system_packages)


def _format_version(version: tuple[int, ...] | None) -> str:
    if version is None:
        return "not installed"
    return ".".join(str(part) for part in version)
