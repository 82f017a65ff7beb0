"""Exports for the provisioning steps and the run orchestrator."""

from .activation import ServiceActivator
from .install import InstallReport, PackageInstaller
from .interfaces import InterfaceEnabler
from .probe import EnvironmentProber, ProbeReport
from .prompts import ConsolePrompter, Prompter, confirm
from .provision import (
    ProvisionRequest,
    ProvisionResult,
    Provisioner,
    collect_request,
    validate_username,
)
from .reboot import RebootPrompter

__all__ = [
    "EnvironmentProber",
    "ProbeReport",
    "PackageInstaller",
    "InstallReport",
    "InterfaceEnabler",
    "ServiceActivator",
    "RebootPrompter",
    "Provisioner",
    "ProvisionRequest",
    "ProvisionResult",
    "collect_request",
    "validate_username",
    "Prompter",
    "ConsolePrompter",
    "confirm",
]
