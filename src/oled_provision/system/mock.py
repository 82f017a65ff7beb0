"""In-memory system doubles for deterministic pipeline testing.

The mocks keep just enough state to behave coherently across tools: installing
``python3`` through the package manager upgrades the mock interpreter, pip
installs make modules importable, and the service manager only knows units
that were written through the mock file system before a daemon reload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping, Sequence

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

DEFAULT_PROVIDERS: Mapping[str, str] = {
    "adafruit-blinka": "board",
    "adafruit-circuitpython-ssd1306": "adafruit_ssd1306",
    "pillow": "PIL",
    "psutil": "psutil",
}

INSTALLED_PYTHON_VERSION = (3, 11, 2)


@dataclass(slots=True)
class MockPythonToolchain(PythonToolchain):
    """Interpreter double tracking virtual environments and their modules."""

    python_version: tuple[int, int, int] | None = INSTALLED_PYTHON_VERSION
    pip_present: bool = True
    modules: dict[Path, set[str]] = field(default_factory=dict)
    providers: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_PROVIDERS))
    distributions: dict[Path, set[str]] = field(default_factory=dict)
    alternatives: dict[str, str] = field(default_factory=dict)
    fail_on_pip: bool = False
    calls: list[tuple[str, ...]] = field(default_factory=list)

    def version(self, command: str) -> tuple[int, int, int] | None:
        return self.python_version

    def pip_available(self) -> bool:
        return self.pip_present

    def interpreter_exists(self, interpreter: Path) -> bool:
        return Path(interpreter) in self.modules

    def module_available(self, interpreter: Path, module: str) -> bool:
        return module in self.modules.get(Path(interpreter), set())

    def create_venv(self, command: str, venv_dir: Path) -> None:
        self.calls.append(("venv", str(venv_dir)))
        if self.python_version is None:
            raise ExternalToolError([command, "-m", "venv", str(venv_dir)], 127, f"{command}: command not found")
        self.modules.setdefault(Path(venv_dir) / "bin" / "python3", set())

    def pip_install(self, interpreter: Path, distributions: Sequence[str]) -> None:
        interpreter = Path(interpreter)
        argv = [str(interpreter), "-m", "pip", "install", "--upgrade", *distributions]
        self.calls.append(("pip", *distributions))
        if self.fail_on_pip:
            raise ExternalToolError(argv, 1, "ERROR: Could not find a version that satisfies the requirement")
        if interpreter not in self.modules:
            raise ExternalToolError(argv, 127, f"{interpreter}: No such file or directory")
        self.distributions.setdefault(interpreter, set()).update(distributions)
        for distribution in distributions:
            module = self.providers.get(distribution)
            if module is not None:
                self.modules[interpreter].add(module)

    def register_default(self, link: str, command: str, priority: int) -> None:
        self.calls.append(("alternatives", link, command, str(priority)))
        self.alternatives["python"] = command

    def add_venv(self, venv_dir: Path, modules: Iterable[str] = ()) -> Path:
        """Pretend a virtual environment already exists with ``modules`` importable."""
        interpreter = Path(venv_dir) / "bin" / "python3"
        self.modules.setdefault(interpreter, set()).update(modules)
        return interpreter


@dataclass(slots=True)
class MockPackageManager(PackageManager):
    """apt double that records installs and updates."""

    installed: set[str] = field(default_factory=set)
    python: MockPythonToolchain | None = None
    fail_on_install: set[str] = field(default_factory=set)
    calls: list[tuple[str, ...]] = field(default_factory=list)

    def is_installed(self, package: str) -> bool:
        return package in self.installed

    def update(self) -> None:
        self.calls.append(("update",))

    def install(self, packages: Sequence[str], *, upgrade: bool = False) -> None:
        self.calls.append(("install", *packages))
        failing = sorted(set(packages) & self.fail_on_install)
        if failing:
            raise ExternalToolError(
                ["apt-get", "install", "-y", *packages],
                100,
                f"E: Unable to locate package {failing[0]}",
            )
        self.installed.update(packages)
        if self.python is not None:
            if "python3" in packages:
                self.python.python_version = INSTALLED_PYTHON_VERSION
            if "python3-pip" in packages:
                self.python.pip_present = True


@dataclass(slots=True)
class MockInterfaceConfigurator(InterfaceConfigurator):
    """raspi-config double; ``fail_on`` names functions that exit non-zero."""

    fail_on: set[str] = field(default_factory=set)
    calls: list[tuple[str, ...]] = field(default_factory=list)

    def apply(self, arguments: Sequence[str]) -> None:
        args = tuple(str(arg) for arg in arguments)
        self.calls.append(args)
        if set(args) & self.fail_on:
            raise ExternalToolError(["raspi-config", *args], 1, "raspi-config: function failed")


@dataclass(slots=True)
class MockFileSystem(FileSystem):
    """File system double holding pre-existing files and installed content."""

    existing: set[Path] = field(default_factory=set)
    written: dict[Path, str] = field(default_factory=dict)
    modes: dict[Path, int] = field(default_factory=dict)
    owners: dict[Path, str] = field(default_factory=dict)

    def is_file(self, path: Path) -> bool:
        path = Path(path)
        return path in self.existing or path in self.written

    def install_file(self, path: Path, content: str, *, mode: int = 0o644, owner: str = "root") -> None:
        path = Path(path)
        self.written[path] = content
        self.modes[path] = mode
        self.owners[path] = owner


@dataclass(slots=True)
class MockServiceManager(ServiceManager):
    """systemctl double implementing the Unknown/Disabled/Active lifecycle."""

    files: MockFileSystem = field(default_factory=MockFileSystem)
    states: dict[str, ServiceState] = field(default_factory=dict)
    calls: list[tuple[str, ...]] = field(default_factory=list)

    def daemon_reload(self) -> None:
        self.calls.append(("daemon-reload",))
        for path in self.files.written:
            if path.suffix == ".service" and self.state(path.stem) is ServiceState.UNKNOWN:
                self.states[path.stem] = ServiceState.DISABLED

    def disable(self, name: str, *, now: bool = True) -> None:
        self.calls.append(("disable", name))
        self._require_known("disable", name)
        self.states[name] = ServiceState.DISABLED

    def enable(self, name: str, *, now: bool = True) -> None:
        self.calls.append(("enable", name))
        self._require_known("enable", name)
        self.states[name] = ServiceState.ACTIVE if now else ServiceState.DISABLED

    def state(self, name: str) -> ServiceState:
        return self.states.get(name, ServiceState.UNKNOWN)

    def _require_known(self, verb: str, name: str) -> None:
        if self.state(name) is ServiceState.UNKNOWN:
            raise ExternalToolError(
                ["systemctl", verb, name, "--now"],
                1,
                f"Failed to {verb} unit: Unit file {name}.service does not exist.",
            )


@dataclass(slots=True)
class ScriptedPrompter:
    """Prompter replaying canned answers and recording every question asked."""

    answers: list[str] = field(default_factory=list)
    questions: list[str] = field(default_factory=list)

    def ask(self, question: str) -> str:
        self.questions.append(question)
        if not self.answers:
            return ""
        return self.answers.pop(0)


@dataclass(slots=True)
class MockPowerControl(PowerControl):
    reboots: int = 0

    def reboot(self) -> None:
        self.reboots += 1


def mock_environment(
    *,
    scripts: Iterable[Path] = (),
    python_version: tuple[int, int, int] | None = INSTALLED_PYTHON_VERSION,
    pip_present: bool = True,
    installed_packages: Iterable[str] = (),
) -> SystemEnvironment:
    """Assemble a coherent in-memory :class:`SystemEnvironment`.

    Args:
        scripts: Entry-point scripts that exist on the fake disk.
        python_version: Version reported by the system interpreter.
        pip_present: Whether a system ``pip3`` is available.
        installed_packages: OS packages already installed.
    """
    python = MockPythonToolchain(python_version=python_version, pip_present=pip_present)
    files = MockFileSystem(existing={Path(script) for script in scripts})
    return SystemEnvironment(
        packages=MockPackageManager(installed=set(installed_packages), python=python),
        python=python,
        interfaces=MockInterfaceConfigurator(),
        services=MockServiceManager(files=files),
        files=files,
        power=MockPowerControl(),
    )


def mutating_calls(env: SystemEnvironment) -> list[tuple[str, ...]]:
    """Return every recorded state-changing call across the mock tools."""
    calls: list[tuple[str, ...]] = []
    for tool in (env.packages, env.python, env.interfaces, env.services):
        calls.extend(getattr(tool, "calls", ()))
    calls.extend(("write", str(path)) for path in getattr(env.files, "written", {}))
    calls.extend(("reboot",) for _ in range(getattr(env.power, "reboots", 0)))
    return calls
