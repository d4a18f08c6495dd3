from __future__ import annotations

from typing import Final

ENV_DEBUG: Final = "UNIASSIGN_DEBUG"

DTYPE: Final = "float64"
