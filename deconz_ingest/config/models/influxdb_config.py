#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: influxdb_config.py
# Author: Rajaram Lakshmanan
# Description: Configuration of the InfluxDB time series sink.
# License: MIT (see LICENSE)
# ------------------------------------------------------------------------------

from typing import Literal, Optional

from pydantic import BaseModel


class InfluxDBConfig(BaseModel):
    """Configuration of the InfluxDB time series sink."""
    is_enabled: bool = True
    url: str = "http://localhost:8086"
    token: Optional[str] = None  # Read from the credential store if not set
    org: str = "home"
    bucket: str = "sensors"
    measurement_prefix: str = "deflux_"

    # Timestamp of the written points: the time the event was received by the
    # pipeline ("ingestion") or the 'lastupdated' time reported by the sensor ("event")
    timestamp_source: Literal["ingestion", "event"] = "ingestion"

    batch_size: int = 20
    flush_interval_ms: int = 1000
    max_retries: int = 5

    model_config = {
        "extra": "ignore"
    }
