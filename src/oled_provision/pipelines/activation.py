"""Register the unit files and leave exactly one display service running."""

from __future__ import annotations

import logging
from typing import Sequence

from ..system.base import ServiceManager, ServiceState
from ..utils.errors import ValidationError

LOGGER = logging.getLogger(__name__)


class ServiceActivator:
    """Drive every known service to Disabled, then the selected one to Active."""

    def __init__(self, services: ServiceManager) -> None:
        self._services = services

    def activate(self, selected: str, known: Sequence[str]) -> dict[str, ServiceState]:
        """Apply daemon-reload, disable-all, enable-selected in that order.

        Args:
            selected: Service to enable and start.
            known: Every service managed by the installer, ``selected`` included.

        Returns:
            dict[str, ServiceState]: State of each known service afterwards.

        Raises:
            ValidationError: If ``selected`` is not one of ``known``; raised
                before any service manager call.
            ExternalToolError: If a ``systemctl`` command fails.
        """
        names = tuple(dict.fromkeys(known))
        if selected not in names:
            raise ValidationError(f"Unknown service '{selected}'; expected one of {list(names)}")

        LOGGER.info("Reloading systemd daemon...")
        self._services.daemon_reload()

        LOGGER.info("Disabling %s...", ", ".join(names))
        for name in names:
            self._services.disable(name, now=True)

        LOGGER.info("Enabling and starting %s service...", selected)
        self._services.enable(selected, now=True)

        states = {name: self._services.state(name) for name in names}
        LOGGER.debug("Service states after activation: %s", states)
        return states
