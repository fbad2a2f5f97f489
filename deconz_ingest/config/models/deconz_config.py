#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: deconz_config.py
# Author: Rajaram Lakshmanan
# Description: Configuration of the connection to the deCONZ gateway (REST API
# and WebSocket event feed).
# License: MIT (see LICENSE)
# ------------------------------------------------------------------------------

from typing import Optional

from pydantic import BaseModel, field_validator
from pydantic_core.core_schema import ValidationInfo


class DeconzConfig(BaseModel):
    """Configuration of the deCONZ gateway."""
    host: str = "localhost"
    port: int = 80
    api_key: Optional[str] = None  # Read from the credential store if not set
    websocket_url: Optional[str] = None  # Discovered through the REST API if not set
    request_timeout: float = 10.0
    refresh_interval: float = 60.0  # Minimum seconds between two sensor cache refreshes

    @field_validator('port') # noqa
    @staticmethod
    def validate_port(v, info: ValidationInfo): # noqa
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator('request_timeout', 'refresh_interval') # noqa
    @staticmethod
    def validate_positive(v, info: ValidationInfo): # noqa
        if v < 0:
            raise ValueError(f"{info.field_name} must not be negative")
        return v

    @property
    def base_url(self) -> str:
        """Return the base URL of the REST API."""
        return f"http://{self.host}:{self.port}"

    model_config = {
        "extra": "ignore"
    }
