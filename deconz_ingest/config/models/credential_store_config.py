#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: credential_store_config.py
# Author: Rajaram Lakshmanan
# Description: Location of the encrypted credential store.
# License: MIT (see LICENSE)
# ------------------------------------------------------------------------------

from pydantic import BaseModel


class CredentialStoreConfig(BaseModel):
    """Location of the encrypted credentials (deCONZ API key, InfluxDB token)."""
    credential_file: str = "config/credentials.enc"
    key_file: str = "config/credentials.key"

    model_config = {
        "extra": "ignore"
    }
