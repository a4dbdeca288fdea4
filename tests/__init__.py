"""Test package for milvus_pool."""

from __future__ import annotations

import sys
from pathlib import Path

# Make src/ importable without an editable install.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_PATH = _PROJECT_ROOT / "src"
if _SRC_PATH.is_dir() and str(_SRC_PATH) not in sys.path:
    sys.path.insert(0, str(_SRC_PATH))

__all__ = ["_PROJECT_ROOT", "_SRC_PATH"]
