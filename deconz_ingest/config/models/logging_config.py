#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: logging_config.py
# Author: Rajaram Lakshmanan
# Description: Logging configuration (level, format and handlers).
# License: MIT (see LICENSE)
# ------------------------------------------------------------------------------

import logging
from typing import Any, Dict

from pydantic import BaseModel, field_validator
from pydantic_core.core_schema import ValidationInfo


class LoggingConfig(BaseModel):
    """
    Logging configuration.

    Handlers other than the console are configured by name, e.g.
    ``{"file": {"is_enabled": true, "path": "logs/deconz_ingest.log",
    "max_size_mb": 10, "backup_count": 5}}``.
    """
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    handlers: Dict[str, Dict[str, Any]] = {}

    @field_validator('level') # noqa
    @staticmethod
    def validate_level(v, info: ValidationInfo): # noqa
        if not isinstance(logging.getLevelName(v.upper()), int):
            raise ValueError(f"Unknown logging level: {v}")
        return v

    model_config = {
        "extra": "ignore"
    }
