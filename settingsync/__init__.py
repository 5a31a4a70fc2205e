from __future__ import annotations

from pathlib import Path

SETTINGSYNC_ROOT = Path(__file__).parent
__version__ = "0.4.2"
