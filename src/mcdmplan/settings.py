from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8080
    title: str = "MCDM Production Planning"
    log_level: str = "INFO"
    log_file: Path | None = None
    # Artificial latency before a result is shown (UI feedback only, may be 0).
    processing_delay_seconds: float = 0.5
