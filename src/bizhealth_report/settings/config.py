"""Application-wide configuration defaults and helpers."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Optional

# Base directory for resolving relative paths.
BASE_DIR = Path.cwd()

DEFAULT_FEATURES = frozenset({"advanced_analysis"})


def _to_bool(value: Optional[str], default: bool = False) -> bool:
    """Parse truthy environment values like '1' or 'true'."""
    if value is None:
        return default
    # Normalize non-string inputs (e.g., int defaults) before parsing.
    if not isinstance(value, str):
        value = str(value)
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_int(value: Optional[str]) -> Optional[int]:
    """Safely parse an integer env var, returning None on failure."""
    if value is None:
        return None
    try:
        parsed = int(str(value).strip())
        return parsed
    except (TypeError, ValueError):
        return None


def _to_features(value: Optional[str]) -> FrozenSet[str]:
    """Split a comma separated feature list; None keeps the defaults."""
    if value is None:
        return DEFAULT_FEATURES
    return frozenset(item.strip() for item in value.split(",") if item.strip())


@dataclass
class Config:
    """Runtime configuration loaded from environment variables."""

    debug: bool = False
    output_dir: Path = BASE_DIR / "reports"
    forecast_months: int = 12
    max_history: Optional[int] = None
    enabled_features: FrozenSet[str] = field(default_factory=lambda: DEFAULT_FEATURES)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a configuration instance using environment overrides."""
        output_dir = Path(os.getenv("OUTPUT_DIR", BASE_DIR / "reports"))
        forecast_months = _to_int(os.getenv("FORECAST_MONTHS"))
        max_history = _to_int(os.getenv("MAX_HISTORY"))

        return cls(
            debug=_to_bool(os.getenv("APP_DEBUG")),
            output_dir=output_dir,
            forecast_months=forecast_months if forecast_months and forecast_months > 0 else 12,
            max_history=max_history if max_history and max_history > 0 else None,
            enabled_features=_to_features(os.getenv("ENABLED_FEATURES")),
        )

    def ensure_directories(self) -> None:
        """Create directories needed for runtime artifacts."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
