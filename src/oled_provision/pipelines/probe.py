"""Read-only detection of what is already installed."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..config.models import ProvisionConfig
from ..system.base import SystemEnvironment

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ProbeReport:
    """Snapshot of the installation state, computed fresh on every run.

    Attributes:
        python_version: Version of the system interpreter, ``None`` if absent.
        python_sufficient: Whether the version meets the configured minimum.
        pip_available: Whether a system ``pip3`` is on ``PATH``.
        venv_ready: Whether the virtual environment interpreter exists.
        modules: Import name to availability inside the virtual environment.
        system_packages: OS package name to installed flag.
    """

    python_version: tuple[int, int, int] | None = None
    python_sufficient: bool = False
    pip_available: bool = False
    venv_ready: bool = False
    modules: dict[str, bool] = field(default_factory=dict)
    system_packages: dict[str, bool] = field(default_factory=dict)

    def missing_modules(self) -> list[str]:
        return [name for name, present in self.modules.items() if not present]

    def missing_packages(self) -> list[str]:
        return [name for name, present in self.system_packages.items() if not present]


class EnvironmentProber:
    """Detect interpreter, pip, virtual environment, modules and OS packages.

    Probing never raises: a tool that cannot be queried counts as absent.
    """

    def __init__(self, env: SystemEnvironment, config: ProvisionConfig) -> None:
        self._env = env
        self._config = config

    def probe(self) -> ProbeReport:
        python = self._env.python
        settings = self._config.python
        report = ProbeReport()

        report.python_version = self._safe(lambda: python.version(settings.command), None)
        if report.python_version is not None:
            report.python_sufficient = report.python_version[:2] >= settings.minimum_version
        report.pip_available = self._safe(python.pip_available, False)

        interpreter = self._config.venv_python
        report.venv_ready = self._safe(lambda: python.interpreter_exists(interpreter), False)
        for requirement in self._config.libraries:
            present = report.venv_ready and self._safe(
                lambda: python.module_available(interpreter, requirement.module), False
            )
            report.modules[requirement.module] = bool(present)

        for package in self._config.system_packages():
            report.system_packages[package] = self._safe(
                lambda: self._env.packages.is_installed(package), False
            )

        LOGGER.debug("Probe report: %s", report)
        missing_modules = report.missing_modules()
        if missing_modules:
            LOGGER.info("Modules missing from %s: %s", interpreter, ", ".join(missing_modules))
        missing_packages = report.missing_packages()
        if missing_packages:
            LOGGER.info("System packages missing: %s", ", ".join(missing_packages))
        return report

    @staticmethod
    def _safe(check, fallback):
        try:
            return check()
        except Exception as exc:  # probes report absence, never raise
            LOGGER.debug("Probe failed, treating as absent: %s", exc)
            return fallback
