#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: app_config.py
# Author: Rajaram Lakshmanan
# Description: Application configuration.
# License: MIT (see LICENSE)
# ------------------------------------------------------------------------------

from pydantic import BaseModel

class AppConfig(BaseModel):
    """Application configuration (name and version reported at start-up)."""
    name: str = "deconz-ingest"
    version: str = "0.1.0"

    model_config = {
        "extra": "ignore"
    }
