from __future__ import annotations

import sys
from pathlib import Path

_START = Path(__file__).resolve().parent
_project_root = _START
while _project_root != _project_root.parent and not (_project_root / "tweakable" / "__init__.py").exists():
    _project_root = _project_root.parent

sys.path.insert(0, str(_project_root))
