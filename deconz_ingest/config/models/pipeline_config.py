#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: pipeline_config.py
# Author: Rajaram Lakshmanan
# Description: Configuration of the sensor event pipeline (redial and output
# queue behaviour).
# License: MIT (see LICENSE)
# ------------------------------------------------------------------------------

from pydantic import BaseModel, field_validator
from pydantic_core.core_schema import ValidationInfo


class PipelineConfig(BaseModel):
    """Configuration of the sensor event pipeline."""
    reconnect_delay: float = 5.0  # Seconds to wait before redialing a failed connection
    read_timeout: float = 1.0  # Poll window of a single read on the event feed
    max_queue_size: int = 10000  # 0 = unbounded

    @field_validator('reconnect_delay', 'read_timeout') # noqa
    @staticmethod
    def validate_positive(v, info: ValidationInfo): # noqa
        if v <= 0:
            raise ValueError(f"{info.field_name} must be greater than 0")
        return v

    @field_validator('max_queue_size') # noqa
    @staticmethod
    def validate_queue_size(v, info: ValidationInfo): # noqa
        if v < 0:
            raise ValueError("max_queue_size must not be negative")
        return v

    model_config = {
        "extra": "ignore"
    }
