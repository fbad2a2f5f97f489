#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: timeseries.py
# Author: Rajaram Lakshmanan
# Description: Derives the tags and fields written to the time series
# database from a decoded sensor state and the sensor configuration.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from deconz_ingest.errors import IncompleteThermostatConfigError, NoTimeseriesDataError
from deconz_ingest.sensor.sensor_config import SensorConfig
from deconz_ingest.sensor.state.base_sensor_state import SensorState, merge_fields

THERMOSTAT_SENSOR_TYPE = "ZHAThermostat"

# Value of the 'source' tag on every point
TIMESERIES_SOURCE = "rest"


def derive_timeseries(state: Any,
                      config: SensorConfig,
                      sensor_id: int,
                      sensor_name: str,
                      sensor_type: str,
                      now: Optional[datetime] = None) -> Tuple[Dict[str, str], Dict[str, Any]]:
    """
    Derive tags and fields for the time series database.

    Fields are the state's own fields (measurements and age), supplemented by the
    battery level from the config and, for thermostats, the set point, mode, offset
    and external sensor temperature. If the state already provides a field, the
    state value is kept.

    Args:
        state: The decoded sensor state.
        config (SensorConfig): The configuration of the sensor.
        sensor_id (int): The id of the sensor.
        sensor_name (str): The name of the sensor.
        sensor_type (str): The deCONZ type of the sensor.
        now (datetime): Reference time for the age field (default = now).

    Returns:
        tuple: (tags, fields)

    Raises:
        NoTimeseriesDataError: If the state has no measurable fields.
        IncompleteThermostatConfigError: If a thermostat config value is missing.
    """
    if not isinstance(state, SensorState):
        raise NoTimeseriesDataError(
            f"This sensor ({type(state).__name__}:{sensor_name}) has no time series data")

    supplemental: Dict[str, Any] = {}
    if config.battery is not None:
        supplemental["battery"] = config.battery

    if sensor_type == THERMOSTAT_SENSOR_TYPE:
        supplemental.update(_thermostat_fields(config, sensor_name))

    fields = merge_fields(state.fields(now), supplemental)

    tags = {
        "name": sensor_name,
        "type": sensor_type,
        "id": str(sensor_id),
        "source": TIMESERIES_SOURCE
    }
    return tags, fields


def _thermostat_fields(config: SensorConfig, sensor_name: str) -> Dict[str, Any]:
    """Return the thermostat specific fields from the config; set point, offset and temperature in degrees."""
    missing = [name for name in ("heatsetpoint", "mode", "offset", "externalsensortemp")
               if getattr(config, name) is None]
    if missing:
        raise IncompleteThermostatConfigError(
            f"Thermostat {sensor_name} is missing config values: {', '.join(missing)}")

    return {
        "heatsetpoint": config.heatsetpoint / 100,
        "mode": config.mode,
        "offset": config.offset / 100,
        "externalsensortemp": config.externalsensortemp / 100
    }
