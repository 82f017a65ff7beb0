"""Public system tool interfaces exposed by :mod:`oled_provision`."""

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
from .mock import mock_environment
from .shell import CommandResult, CommandRunner, shell_environment

__all__ = [
    "SystemEnvironment",
    "PackageManager",
    "PythonToolchain",
    "InterfaceConfigurator",
    "ServiceManager",
    "ServiceState",
    "FileSystem",
    "PowerControl",
    "CommandRunner",
    "CommandResult",
    "shell_environment",
    "mock_environment",
]
