"""Convenience exports for provisioning configuration."""

from __future__ import annotations

from .loader import DEFAULT_CONFIG_PATH, load_provision_config
from .models import (
    RESTART_POLICIES,
    InterfaceCommand,
    LibraryRequirement,
    ProvisionConfig,
    PythonSettings,
    ServiceSettings,
)

__all__ = [
    "load_provision_config",
    "DEFAULT_CONFIG_PATH",
    "ProvisionConfig",
    "PythonSettings",
    "ServiceSettings",
    "LibraryRequirement",
    "InterfaceCommand",
    "RESTART_POLICIES",
]
