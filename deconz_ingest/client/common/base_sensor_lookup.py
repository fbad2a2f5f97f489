#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: base_sensor_lookup.py
# Author: Rajaram Lakshmanan
# Description:  Base class for the sensor lookup (sensor registry).
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

import abc

from deconz_ingest.sensor.sensor import Sensor

class BaseSensorLookup(abc.ABC):
    """Base class to look up the metadata and config of a sensor by its id."""

    @abc.abstractmethod
    def lookup_sensor(self, sensor_id: int) -> Sensor:
        """
        Look up a sensor.

        Args:
            sensor_id (int): The id of the sensor assigned by the gateway.

        Returns:
            Sensor: The sensor.

        Raises:
            SensorNotFoundError: If the sensor is not known.
        """
        pass
