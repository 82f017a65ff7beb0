"""Service naming and unit file generation."""

from .modes import DEFAULT_SERVICE_NAMES, DeviceMode
from .unit import ServiceDescriptor, UnitGenerator, render_unit

__all__ = [
    "DeviceMode",
    "DEFAULT_SERVICE_NAMES",
    "ServiceDescriptor",
    "UnitGenerator",
    "render_unit",
]
