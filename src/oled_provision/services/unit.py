"""Systemd unit rendering and installation for the display services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Sequence

from ..system.base import FileSystem
from ..utils.errors import ScriptNotFoundError

LOGGER = logging.getLogger(__name__)

UNIT_FILE_MODE = 0o644
UNIT_FILE_OWNER = "root"


@dataclass(frozen=True, slots=True)
class ServiceDescriptor:
    """Everything needed to render one unit file.

    Args:
        name: Systemd service name without the ``.service`` suffix.
        script_path: Absolute path of the entry-point script.
        interpreter: Interpreter that runs the script.
        unit_path: Destination of the rendered unit file.
        restart: Value of the ``Restart=`` directive.
    """

    name: str
    script_path: Path
    interpreter: Path
    unit_path: Path
    restart: str = "always"

    @property
    def working_directory(self) -> Path:
        """Directory the service runs from, the script's parent."""
        return self.script_path.parent

    @property
    def description(self) -> str:
        return f"{self.name} - Service for OLED Display"


def render_unit(descriptor: ServiceDescriptor) -> str:
    """Render the unit file text for ``descriptor``.

    The result depends only on the descriptor, so identical inputs always
    produce byte-identical output.
    """
    script = PurePosixPath(descriptor.script_path)
    lines = [
        "[Unit]",
        f"Description={descriptor.description}",
        "After=network-online.target multi-user.target",
        "Wants=network-online.target",
        "",
        "[Service]",
        f"ExecStart={PurePosixPath(descriptor.interpreter)} {script}",
        f"WorkingDirectory={script.parent}",
        "StandardOutput=inherit",
        "StandardError=inherit",
        f"Restart={descriptor.restart}",
        "",
        "[Install]",
        "WantedBy=multi-user.target",
    ]
    return "\n".join(lines) + "\n"


class UnitGenerator:
    """Validate entry points and install rendered unit files."""

    def __init__(self, files: FileSystem) -> None:
        self._files = files

    def check_scripts(self, descriptors: Sequence[ServiceDescriptor]) -> None:
        """Raise :class:`ScriptNotFoundError` for the first missing script."""
        for descriptor in descriptors:
            if not self._files.is_file(descriptor.script_path):
                LOGGER.error("Python script %s not found", descriptor.script_path)
                raise ScriptNotFoundError(descriptor.script_path)

    def generate_all(self, descriptors: Sequence[ServiceDescriptor]) -> list[Path]:
        """Write every unit file, or none if any script is missing."""
        self.check_scripts(descriptors)
        return [self._write(descriptor) for descriptor in descriptors]

    def _write(self, descriptor: ServiceDescriptor) -> Path:
        LOGGER.info("Creating the service file at %s", descriptor.unit_path)
        self._files.install_file(
            descriptor.unit_path,
            render_unit(descriptor),
            mode=UNIT_FILE_MODE,
            owner=UNIT_FILE_OWNER,
        )
        LOGGER.info("Service file %s created successfully", descriptor.unit_path)
        return descriptor.unit_path
