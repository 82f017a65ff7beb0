"""Enable the Raspberry Pi hardware interfaces the displays need."""

from __future__ import annotations

import logging
from typing import Sequence

from ..config.models import InterfaceCommand
from ..system.base import InterfaceConfigurator

LOGGER = logging.getLogger(__name__)


class InterfaceEnabler:
    """Run each ``raspi-config nonint`` command in manifest order.

    A failing command raises :class:`~oled_provision.utils.errors.ExternalToolError`
    and stops the run, the same policy applied to every other external tool.
    """

    def __init__(self, configurator: InterfaceConfigurator, commands: Sequence[InterfaceCommand]) -> None:
        self._configurator = configurator
        self._commands = tuple(commands)

    def run(self) -> list[str]:
        LOGGER.info("Enabling Raspberry Pi interfaces...")
        applied: list[str] = []
        for command in self._commands:
            LOGGER.info("Configuring %s (%s %d)", command.label, command.function, command.value)
            self._configurator.apply(command.argv())
            applied.append(command.function)
        return applied
