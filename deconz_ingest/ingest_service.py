#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: ingest_service.py
# Author: Rajaram Lakshmanan
# Description: Ingest service. Wires the deCONZ event feed, the sensor
# registry and the InfluxDB sink together and runs them until terminated.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

import argparse
import getpass
import logging
import os
import signal
import sys
import time
from logging.handlers import RotatingFileHandler
from queue import Empty, Queue
from typing import Optional

from deconz_ingest.client.rest.rest_sensor_registry import RestSensorRegistry
from deconz_ingest.client.websocket.websocket_event_reader import WebsocketEventReader
from deconz_ingest.config.config_manager import ConfigManager
from deconz_ingest.config.models.ingest_config import IngestConfig
from deconz_ingest.config.models.logging_config import LoggingConfig
from deconz_ingest.errors import DerivationError
from deconz_ingest.pipeline.sensor_event_reader import SensorEventReader
from deconz_ingest.repository.credential_store import DECONZ_API_KEY, INFLUXDB_TOKEN, CredentialStore
from deconz_ingest.repository.time_series.influx_client_factory import InfluxClientFactory
from deconz_ingest.repository.time_series.sensor_time_series_repository import SensorTimeSeriesRepository

logger = logging.getLogger("IngestService")

DEFAULT_CONFIG_FILE = 'config/config.yaml'

# Attempts to reach the gateway REST API before giving up at start-up
GATEWAY_STARTUP_ATTEMPTS = 3


def configure_logging(logging_config: LoggingConfig) -> None:
    """
    Route all loggers to the console and, if enabled, to a rotating log file.

    Args:
        logging_config (LoggingConfig): The logging section of the configuration.
    """
    level = logging.getLevelName(logging_config.level.upper())
    formatter = logging.Formatter(logging_config.format)

    handlers = [logging.StreamHandler(sys.stdout)]

    file_settings = logging_config.handlers.get("file", {})
    if file_settings.get("is_enabled", False):
        log_path = file_settings.get("path", "logs/deconz_ingest.log")
        log_dir = os.path.dirname(log_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(RotatingFileHandler(log_path,
                                            maxBytes=file_settings.get("max_size_mb", 10) * 1024 * 1024,
                                            backupCount=file_settings.get("backup_count", 5)))

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)


class IngestService:
    """
    Ingest service.

    Sensor events flow from the WebSocket feed through the sensor event reader
    into a bounded queue, which is drained by the InfluxDB time series
    repository (or logged, when the repository is disabled).
    """

    def __init__(self, config_path: str = DEFAULT_CONFIG_FILE):
        """
        Initialize the ingest service.

        Args:
            config_path (str): Path of the YAML or JSON configuration file.
        """
        self._config_path = config_path
        self._config: Optional[IngestConfig] = None

        self._credential_store: Optional[CredentialStore] = None
        self._sensor_registry: Optional[RestSensorRegistry] = None
        self._sensor_event_queue: Optional[Queue] = None
        self._sensor_event_reader: Optional[SensorEventReader] = None
        self._influx_client_factory: Optional[InfluxClientFactory] = None
        self._time_series_repository: Optional[SensorTimeSeriesRepository] = None

        self._keep_running = False

        signal.signal(signal.SIGINT, self._request_shutdown)
        signal.signal(signal.SIGTERM, self._request_shutdown)

    # === Public API Functions ===

    def run(self):
        """Run the ingest service until SIGINT/SIGTERM. Exits with status 1 on a start-up failure."""
        try:
            self._config = ConfigManager().load(self._config_path)
        except (FileNotFoundError, ValueError) as e:
            logger.error(f"Unable to load configuration {self._config_path}: {e}")
            sys.exit(1)

        configure_logging(self._config.logging)
        logger.info(f"{self._config.app.name} {self._config.app.version} starting")

        try:
            self._build_pipeline()
        except Exception as e:
            logger.error(f"Unable to set up the ingest pipeline: {e}", exc_info=True)
            self._shutdown_pipeline()
            sys.exit(1)

        self._run_pipeline()
        logger.info(f"{self._config.app.name} stopped")

    # === Local Functions ===

    def _build_pipeline(self):
        """Create the sink first, then the event source; a failure of either aborts the start-up."""
        self._credential_store = CredentialStore(self._config.credentials.credential_file,
                                                 self._config.credentials.key_file)
        self._build_time_series_repository()
        self._build_sensor_event_reader()

    def _build_time_series_repository(self):
        influx_config = self._config.influxdb
        if not influx_config.is_enabled:
            logger.info("InfluxDB sink disabled; sensor events are logged only")
            return

        token = influx_config.token or self._credential_store.get(INFLUXDB_TOKEN)
        if not token:
            raise ValueError(f"No InfluxDB token in the configuration or the credential store ({INFLUXDB_TOKEN})")

        self._influx_client_factory = InfluxClientFactory(influx_config, token)
        self._influx_client_factory.create_influx_client()
        self._influx_client_factory.ensure_bucket_exists()
        self._time_series_repository = SensorTimeSeriesRepository(influx_config,
                                                                  self._influx_client_factory.create_write_api())

    def _build_sensor_event_reader(self):
        deconz_config = self._config.deconz
        pipeline_config = self._config.pipeline

        api_key = deconz_config.api_key or self._credential_store.get(DECONZ_API_KEY)
        if not api_key:
            raise ValueError(f"No deCONZ API key in the configuration or the credential store ({DECONZ_API_KEY})")

        self._sensor_registry = RestSensorRegistry(deconz_config, api_key)
        websocket_url = self._discover_event_feed(pipeline_config.reconnect_delay)

        self._sensor_event_queue = Queue(maxsize=pipeline_config.max_queue_size)
        self._sensor_event_reader = SensorEventReader(
            self._sensor_registry,
            WebsocketEventReader(websocket_url, read_timeout=pipeline_config.read_timeout),
            reconnect_delay=pipeline_config.reconnect_delay)

    def _discover_event_feed(self, retry_delay: float) -> str:
        """Load the sensors and return the event feed URL; the gateway must answer at start-up."""
        for attempt in range(1, GATEWAY_STARTUP_ATTEMPTS + 1):
            try:
                self._sensor_registry.refresh()
                websocket_url = self._sensor_registry.websocket_url()
                logger.info(f"deCONZ event feed at {websocket_url}")
                return websocket_url
            except Exception as e:
                if attempt == GATEWAY_STARTUP_ATTEMPTS:
                    raise
                logger.warning(f"deCONZ gateway not ready ({e}), attempt {attempt} of "
                               f"{GATEWAY_STARTUP_ATTEMPTS}; retrying in {retry_delay}s")
                time.sleep(retry_delay)

    def _run_pipeline(self):
        """Start the consumer before the producer, block until a shutdown is requested, then stop both."""
        if self._time_series_repository:
            self._time_series_repository.start(self._sensor_event_queue)
        self._sensor_event_reader.start(self._sensor_event_queue)

        self._keep_running = True
        try:
            while self._keep_running:
                if self._time_series_repository:
                    time.sleep(1)
                else:
                    self._log_next_sensor_event()
        except KeyboardInterrupt:
            logger.info("Interrupted")
        except Exception as e:
            logger.error(f"Ingest service failed: {e}", exc_info=True)
        finally:
            self._shutdown_pipeline()

    def _shutdown_pipeline(self):
        """Stop the producer first so that the sink can drain what is queued."""
        if self._sensor_event_reader:
            self._sensor_event_reader.stop(timeout=10.0)
            logger.info(f"Sensor event reader: {self._sensor_event_reader.stats()}")

        if self._time_series_repository:
            self._time_series_repository.close()

        if self._influx_client_factory:
            self._influx_client_factory.close()

        if self._sensor_registry:
            self._sensor_registry.close()

    def _request_shutdown(self, signum, _frame):
        logger.info(f"Signal {signal.Signals(signum).name} received, shutting down")
        self._keep_running = False

    def _log_next_sensor_event(self):
        """Consume one sensor event from the queue and log its tags and fields."""
        try:
            sensor_event = self._sensor_event_queue.get(timeout=1)
        except Empty:
            return

        try:
            tags, fields = sensor_event.timeseries()
            logger.info(f"{tags} {fields}")
        except DerivationError as e:
            logger.info(f"Sensor {sensor_event.resource_id}: {e}")
        finally:
            self._sensor_event_queue.task_done()


def store_credential(config_path: str, name: str):
    """Prompt for a credential and store it in the configured credential store."""
    config = ConfigManager().load(config_path)
    store = CredentialStore(config.credentials.credential_file, config.credentials.key_file)
    store.save(name, getpass.getpass(f"{name}: "))
    print(f"Stored {name} in {config.credentials.credential_file}")


def main():
    """Entry point of the deconz-ingest command."""
    parser = argparse.ArgumentParser(description='Ingest deCONZ sensor events into InfluxDB')
    parser.add_argument('-c', '--config', default=DEFAULT_CONFIG_FILE,
                        help=f'YAML or JSON configuration file (default: {DEFAULT_CONFIG_FILE})')
    parser.add_argument('--store-credential', choices=[DECONZ_API_KEY, INFLUXDB_TOKEN],
                        help='Prompt for a credential, store it encrypted and exit')
    args = parser.parse_args()

    if args.store_credential:
        store_credential(args.config, args.store_credential)
        return

    IngestService(config_path=args.config).run()


if __name__ == "__main__":
    main()
