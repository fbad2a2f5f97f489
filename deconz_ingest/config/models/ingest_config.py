#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: ingest_config.py
# Author: Rajaram Lakshmanan
# Description: Main application (deCONZ sensor ingest) configuration.
# License: MIT (see LICENSE)
# ------------------------------------------------------------------------------

from pydantic import BaseModel

from deconz_ingest.config.models.app_config import AppConfig
from deconz_ingest.config.models.credential_store_config import CredentialStoreConfig
from deconz_ingest.config.models.deconz_config import DeconzConfig
from deconz_ingest.config.models.influxdb_config import InfluxDBConfig
from deconz_ingest.config.models.logging_config import LoggingConfig
from deconz_ingest.config.models.pipeline_config import PipelineConfig

class IngestConfig(BaseModel):
    """Main application configuration."""
    app: AppConfig = AppConfig()
    logging: LoggingConfig = LoggingConfig()
    deconz: DeconzConfig
    pipeline: PipelineConfig = PipelineConfig()  # Default config if not specified
    influxdb: InfluxDBConfig = InfluxDBConfig()
    credentials: CredentialStoreConfig = CredentialStoreConfig()

    model_config = {
        "extra": "ignore"
    }
