#!/usr/bin/env python3
"""Provision this Raspberry Pi as an OLED Mother Hub or Daughter Box."""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure local sources are importable without installation
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from oled_provision.cli import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
