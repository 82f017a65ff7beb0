"""Pytest configuration ensuring the project src directory is importable."""

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from oled_provision.config import ProvisionConfig  # noqa: E402

MH_SCRIPT = Path("/home/pi/oled-motherhub/main.py")
DB_SCRIPT = Path("/home/pi/oled-daughterbox/main.py")


@pytest.fixture
def config() -> ProvisionConfig:
    """Provide the built-in default provisioning configuration."""
    return ProvisionConfig()


@pytest.fixture
def scripts() -> tuple[Path, Path]:
    """Entry points for user ``pi`` in both modes."""
    return MH_SCRIPT, DB_SCRIPT
