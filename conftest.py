from __future__ import annotations

import sys
from pathlib import Path

# Tests import `mcdmplan` straight from src/ without installing the package.
HERE = Path(__file__).resolve().parent
SRC = HERE / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
