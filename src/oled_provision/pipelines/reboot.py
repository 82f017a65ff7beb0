"""Final confirmation-gated reboot."""

from __future__ import annotations

import logging

from ..system.base import PowerControl
from .prompts import Prompter, confirm

LOGGER = logging.getLogger(__name__)


class RebootPrompter:
    """Ask whether to reboot now; an empty answer means yes."""

    def __init__(self, power: PowerControl, prompter: Prompter) -> None:
        self._power = power
        self._prompter = prompter

    def run(self, *, ask: bool = True) -> bool:
        """Reboot when confirmed and return whether a reboot was issued."""
        if ask and confirm(self._prompter, "Do you want to reboot now?"):
            LOGGER.info("Rebooting...")
            self._power.reboot()
            return True
        LOGGER.info("Please reboot later for the interface changes to take effect")
        return False
