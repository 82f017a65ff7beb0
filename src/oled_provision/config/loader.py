"""Load provisioning profiles from YAML files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml

from ..services.modes import DeviceMode
from ..utils.errors import ValidationError
from .models import (
    InterfaceCommand,
    LibraryRequirement,
    ProvisionConfig,
    PythonSettings,
    ServiceSettings,
)

DEFAULT_CONFIG_PATH = Path(__file__).with_name("default_provision.yaml")
INTERFACE_VALUES = (0, 1)


def load_provision_config(path: str | Path | None = None) -> ProvisionConfig:
    """Parse a YAML profile describing what the installer should set up.

    The packaged profile is always read first. Top-level sections present in
    ``path`` replace the packaged ones wholesale, so an override file only
    needs to name what it changes.

    Args:
        path: Filesystem path to an override profile. ``None`` loads the
            packaged default profile on its own.

    Returns:
        ProvisionConfig: Validated configuration.

    Raises:
        FileNotFoundError: If the profile path does not exist.
        ValidationError: When a section or field is malformed.
    """
    raw = dict(_read_profile(DEFAULT_CONFIG_PATH))
    if path is not None:
        raw.update(_read_profile(Path(path)))

    config = ProvisionConfig()
    if "python" in raw:
        config.python = _parse_python(raw["python"])
    if "venv" in raw:
        config.venv_dir = _parse_venv(raw["venv"])
    if "libraries" in raw:
        config.libraries = _parse_libraries(raw["libraries"])
    if "interfaces" in raw:
        config.interfaces = _parse_interfaces(raw["interfaces"])
    if "services" in raw:
        config.services = _parse_services(raw["services"])
    config.validate()
    return config


def _read_profile(config_path: Path) -> Mapping[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(config_path)
    with config_path.open("r", encoding="utf-8") as handle:
        try:
            raw = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ValidationError(f"Could not parse {config_path}: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise ValidationError(f"Profile {config_path} must contain a top-level mapping")
    return raw


def _parse_int(raw: Any, where: str, allowed: tuple[int, ...] | None = None) -> int:
    # YAML 1.1 reads on/off/yes/no as booleans, and bool is an int subclass
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValidationError(f"'{where}' must be an integer, got {raw!r}")
    if allowed is not None and raw not in allowed:
        choices = ", ".join(str(value) for value in allowed)
        raise ValidationError(f"'{where}' must be one of {choices}, got {raw}")
    return raw


def _parse_version(raw: Any) -> tuple[int, int]:
    parts = str(raw).strip().split(".")
    try:
        major = int(parts[0])
        minor = int(parts[1]) if len(parts) > 1 else 0
    except ValueError:
        raise ValidationError(f"Invalid minimum_version '{raw}'") from None
    return major, minor


def _string_tuple(raw: Any, where: str) -> tuple[str, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ValidationError(f"'{where}' must be a list")
    return tuple(str(item) for item in raw)


def _parse_python(payload: Any) -> PythonSettings:
    if not isinstance(payload, Mapping):
        raise ValidationError("'python' section must be a mapping")
    settings = PythonSettings()
    if "command" in payload:
        settings.command = str(payload["command"])
    if "minimum_version" in payload:
        settings.minimum_version = _parse_version(payload["minimum_version"])
    if "install_packages" in payload:
        settings.install_packages = _string_tuple(payload["install_packages"], "python.install_packages")
    if "pip_packages" in payload:
        settings.pip_packages = _string_tuple(payload["pip_packages"], "python.pip_packages")
    if "alternative_link" in payload:
        settings.alternative_link = str(payload["alternative_link"])
    if "alternative_priority" in payload:
        settings.alternative_priority = _parse_int(
            payload["alternative_priority"], "python.alternative_priority"
        )
    return settings


def _parse_venv(payload: Any) -> Path:
    if isinstance(payload, str):
        return Path(payload)
    if not isinstance(payload, Mapping) or "path" not in payload:
        raise ValidationError("'venv' section must be a path or a mapping with 'path'")
    return Path(str(payload["path"]))


def _parse_libraries(payload: Any) -> tuple[LibraryRequirement, ...]:
    if not isinstance(payload, list):
        raise ValidationError("'libraries' section must be a list")
    libraries: list[LibraryRequirement] = []
    for idx, entry in enumerate(payload):
        if not isinstance(entry, Mapping):
            raise ValidationError(f"Library #{idx} must be a mapping")
        module = entry.get("module")
        if not module:
            raise ValidationError(f"Library #{idx} missing 'module'")
        distributions = _string_tuple(entry.get("distributions"), f"libraries[{idx}].distributions")
        if not distributions:
            raise ValidationError(f"Library '{module}' must list at least one distribution")
        libraries.append(
            LibraryRequirement(
                module=str(module),
                distributions=distributions,
                system_packages=_string_tuple(
                    entry.get("system_packages"), f"libraries[{idx}].system_packages"
                ),
            )
        )
    return tuple(libraries)


def _parse_interfaces(payload: Any) -> tuple[InterfaceCommand, ...]:
    if not isinstance(payload, list):
        raise ValidationError("'interfaces' section must be a list")
    commands: list[InterfaceCommand] = []
    for idx, entry in enumerate(payload):
        if not isinstance(entry, Mapping):
            raise ValidationError(f"Interface #{idx} must be a mapping")
        function = entry.get("function")
        if not function:
            raise ValidationError(f"Interface #{idx} missing 'function'")
        commands.append(
            InterfaceCommand(
                label=str(entry.get("label", function)),
                function=str(function),
                value=_parse_int(
                    entry.get("value", 0), f"interfaces[{idx}].value", INTERFACE_VALUES
                ),
            )
        )
    return tuple(commands)


def _parse_services(payload: Any) -> ServiceSettings:
    if not isinstance(payload, Mapping):
        raise ValidationError("'services' section must be a mapping")
    settings = ServiceSettings()
    if "unit_dir" in payload:
        settings.unit_dir = Path(str(payload["unit_dir"]))
    if "home_root" in payload:
        settings.home_root = Path(str(payload["home_root"]))
    if "script_name" in payload:
        settings.script_name = str(payload["script_name"])
    if "restart" in payload:
        settings.restart = str(payload["restart"])
    names_payload = payload.get("names")
    if names_payload is not None:
        if not isinstance(names_payload, Mapping):
            raise ValidationError("'services.names' must be a mapping of mode to service name")
        names = dict(settings.names)
        for token, name in names_payload.items():
            names[DeviceMode.from_token(str(token))] = str(name)
        settings.names = names
    return settings
