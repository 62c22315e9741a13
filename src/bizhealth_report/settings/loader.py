"""Settings helpers to centralize configuration access."""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from bizhealth_report.settings.config import Config

logger = logging.getLogger(__name__)


def load_settings(
    debug_override: Optional[bool] = None,
    features_override: Optional[Iterable[str]] = None,
) -> Config:
    """Read the environment, then apply command-line overrides on top."""
    config = Config.from_env()
    if debug_override is not None:
        config.debug = debug_override
    if features_override is not None:
        config.enabled_features = frozenset(f.strip().lower() for f in features_override if f.strip())
        logger.debug("Feature set overridden: %s", sorted(config.enabled_features))
    return config
