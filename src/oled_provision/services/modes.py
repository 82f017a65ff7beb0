"""Device modes and their mapping onto service names."""

from __future__ import annotations

from enum import Enum

from ..utils.errors import ValidationError


class DeviceMode(Enum):
    """Role the Raspberry Pi plays in the display network."""

    MOTHER_HUB = "mh"
    DAUGHTER_BOX = "db"

    @property
    def label(self) -> str:
        """Human readable name used in prompts and logs."""
        return "Mother Hub" if self is DeviceMode.MOTHER_HUB else "Daughter Box"

    @classmethod
    def from_token(cls, token: str) -> "DeviceMode":
        """Parse the operator supplied mode token.

        Args:
            token: Raw text entered at the mode prompt or passed via ``--mode``.

        Returns:
            DeviceMode: The matching mode.

        Raises:
            ValidationError: If the token is not one of the recognised values.
        """
        value = (token or "").strip()
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                "Invalid mode. Please enter 'mh' for Mother Hub or 'db' for Daughter Box."
            ) from None


DEFAULT_SERVICE_NAMES = {
    DeviceMode.MOTHER_HUB: "oled-motherhub",
    DeviceMode.DAUGHTER_BOX: "oled-daughterbox",
}
