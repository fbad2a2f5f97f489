#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: sensor_time_series_repository.py
# Author: Rajaram Lakshmanan
# Description: Drains the sensor event queue and stores the derived time
# series points in InfluxDB.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

import logging
import threading
from datetime import datetime
from queue import Empty, Queue
from typing import Dict, Optional

from influxdb_client import Point, WritePrecision
from influxdb_client.client.write_api import WriteApi

from deconz_ingest.config.models.influxdb_config import InfluxDBConfig
from deconz_ingest.errors import DerivationError
from deconz_ingest.event.sensor_event import SensorEvent
from deconz_ingest.sensor.state.base_sensor_state import SensorState, parse_gateway_timestamp

logger = logging.getLogger("SensorTimeSeriesRepository")


class SensorTimeSeriesRepository:
    """
    Repository for storing sensor time series in InfluxDB.

    A background thread drains the queue of sensor events produced by the
    sensor event reader, derives tags and fields for each event and hands the
    point to the batching write API. Events without time series data are
    skipped; write errors are logged and never stop the drain thread.
    """

    def __init__(self, config: InfluxDBConfig, write_api: WriteApi, poll_interval: float = 0.5):
        """
        Initialize the Sensor Time Series Repository.

        Args:
            config (InfluxDBConfig): Configuration of the time series sink.
            write_api (WriteApi): InfluxDB write API the points are written to.
            poll_interval (float): Seconds to wait for an event before checking for a stop request.
        """
        self._config = config
        self._write_api = write_api
        self._poll_interval = poll_interval

        self._running = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self._written = 0
        self._skipped = 0
        self._failed = 0
        self._stats_lock = threading.Lock()

        logger.info(f"SensorTimeSeriesRepository initialized with bucket {config.bucket}")

    # === Public API Functions ===

    def start(self, in_queue: Queue) -> None:
        """
        Start draining the given queue in a background thread.

        Args:
            in_queue (Queue): Queue of sensor events.
        """
        if self._thread is not None and self._thread.is_alive():
            logger.warning("SensorTimeSeriesRepository is already running")
            return

        self._running.set()
        self._thread = threading.Thread(
            target=self._drain_queue,
            args=(in_queue,),
            daemon=True,
            name="InfluxDB-Writer"
        )
        self._thread.start()
        logger.info("SensorTimeSeriesRepository started")

    def stop(self, timeout: Optional[float] = 10.0) -> None:
        """
        Stop the drain thread after the queued events are written, then flush
        the write API.

        Args:
            timeout (float): Maximum time in seconds to wait for the drain thread.
        """
        self._running.clear()

        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("InfluxDB writer thread did not terminate within the timeout period")

        try:
            self._write_api.flush()
        except Exception as e:
            logger.error(f"Error flushing pending points to InfluxDB: {e}")

        logger.info(f"SensorTimeSeriesRepository stopped ({self.stats()})")

    def close(self) -> None:
        """Stop the repository and close the write API."""
        self.stop()
        try:
            self._write_api.close()
        except Exception as e:
            logger.warning(f"Error closing the InfluxDB write API: {e}")

    def write_event(self, event: SensorEvent) -> bool:
        """
        Store the time series point of a sensor event.

        Args:
            event (SensorEvent): The sensor event.

        Returns:
            bool: True if the point was handed to the write API, False if it was skipped or failed.
        """
        sensor = event.sensor
        try:
            tags, fields = event.timeseries()
        except DerivationError as e:
            logger.warning(f"Not adding event of sensor {sensor.sensor_id} to InfluxDB: {e}")
            self._count("skipped")
            return False

        if not fields:
            logger.warning(f"No fields to store for sensor {sensor.sensor_id} ({sensor.name})")
            self._count("skipped")
            return False

        point = Point(f"{self._config.measurement_prefix}{sensor.sensor_type}")
        for tag_name, tag_value in tags.items():
            point.tag(tag_name, tag_value)
        for field_name, field_value in fields.items():
            point.field(field_name, field_value)
        point.time(self._point_time(event), WritePrecision.NS)

        try:
            self._write_api.write(bucket=self._config.bucket, org=self._config.org, record=point)
        except Exception as e:
            logger.error(f"Error writing point for sensor {sensor.sensor_id} to InfluxDB: {e}")
            self._count("failed")
            return False

        logger.debug(f"Queued point with {len(fields)} fields for {sensor.sensor_type} "
                     f"from {sensor.name} (ID: {sensor.sensor_id})")
        self._count("written")
        return True

    def stats(self) -> Dict[str, int]:
        """Return the number of written, skipped and failed points."""
        with self._stats_lock:
            return {"written": self._written, "skipped": self._skipped, "failed": self._failed}

    # === Local Functions ===

    def _drain_queue(self, in_queue: Queue) -> None:
        """Thread function: write events until stopped and the queue is empty."""
        while True:
            try:
                event = in_queue.get(timeout=self._poll_interval)
            except Empty:
                if not self._running.is_set():
                    break
                continue

            try:
                self.write_event(event)
            except Exception as e:
                logger.error(f"Error handling sensor event: {e}", exc_info=True)
            finally:
                in_queue.task_done()

    def _point_time(self, event: SensorEvent) -> datetime:
        """Return the timestamp of the point according to the configured timestamp source."""
        if self._config.timestamp_source == "event" and isinstance(event.state, SensorState):
            last_updated = parse_gateway_timestamp(event.state.last_updated)
            if last_updated is not None:
                return last_updated
        return event.received_at

    def _count(self, outcome: str) -> None:
        with self._stats_lock:
            if outcome == "written":
                self._written += 1
            elif outcome == "skipped":
                self._skipped += 1
            else:
                self._failed += 1
