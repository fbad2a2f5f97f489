#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: influx_client_factory.py
# Author: Rajaram Lakshmanan
# Description: Factory for creating the InfluxDB client and the batching
# write API used by the time series sink.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

import logging
import time
from typing import Optional

from influxdb_client import InfluxDBClient
from influxdb_client.client.write_api import WriteApi, WriteOptions

from deconz_ingest.config.models.influxdb_config import InfluxDBConfig

logger = logging.getLogger("InfluxClientFactory")


class InfluxClientFactory:
    """
    Factory for creating and configuring InfluxDB clients.

    Handles connection verification with retries and creates the target bucket
    if it does not exist yet.
    """

    def __init__(self, config: InfluxDBConfig, token: str):
        """
        Initialize the InfluxDB Client Factory.

        Args:
            config (InfluxDBConfig): Configuration of the time series sink.
            token (str): The API token for InfluxDB.
        """
        self._config = config
        self._token = token
        self.client: Optional[InfluxDBClient] = None

    def create_influx_client(self, max_retries: int = 3, retry_delay: float = 5) -> InfluxDBClient:
        """
        Create an InfluxDB client and verify the connection, retrying on failure.

        Args:
            max_retries (int): Maximum number of connection attempts
            retry_delay (float): Seconds to wait between attempts

        Returns:
            InfluxDBClient: Connected InfluxDB client

        Raises:
            ConnectionError: If the server is not healthy after all attempts
        """
        for attempt in range(1, max_retries + 1):
            self.client = InfluxDBClient(url=self._config.url, token=self._token, org=self._config.org)
            if self.check_connection():
                logger.info(f"Connected to InfluxDB at {self._config.url}")
                return self.client

            self.close()
            if attempt < max_retries:
                logger.warning(f"Connection attempt {attempt} to InfluxDB failed. "
                               f"Retrying in {retry_delay} seconds...")
                time.sleep(retry_delay)

        raise ConnectionError(f"Failed to connect to InfluxDB at {self._config.url} after {max_retries} attempts")

    def create_write_api(self) -> WriteApi:
        """
        Create the batching write API for the configured bucket.

        Raises:
            ValueError: If the client is not created
        """
        if not self.client:
            raise ValueError("InfluxDB client not initialized. Call create_influx_client first.")

        return self.client.write_api(write_options=WriteOptions(
            batch_size=self._config.batch_size,
            flush_interval=self._config.flush_interval_ms,
            jitter_interval=2000,  # Add jitter to avoid thundering herd
            retry_interval=5000,
            max_retries=self._config.max_retries,
            max_retry_delay=30000,
            exponential_base=2
        ))

    def ensure_bucket_exists(self) -> bool:
        """
        Create the configured bucket if it does not exist.

        Returns:
            bool: True if the bucket exists or was created successfully
        """
        if not self.client:
            raise ValueError("InfluxDB client not initialized. Call create_influx_client first.")

        bucket_name = self._config.bucket
        try:
            buckets_api = self.client.buckets_api()
            if buckets_api.find_bucket_by_name(bucket_name) is None:
                logger.info(f"Bucket '{bucket_name}' not found. Creating it...")
                buckets_api.create_bucket(bucket_name=bucket_name, org=self._config.org)
                logger.info(f"Bucket '{bucket_name}' created successfully")
            return True
        except Exception as e:
            logger.error(f"Error checking/creating bucket '{bucket_name}': {e}")
            return False

    def check_connection(self) -> bool:
        """Return True if the InfluxDB server reports itself healthy."""
        if not self.client:
            return False

        try:
            return self.client.ping()
        except Exception as e:
            logger.error(f"InfluxDB connection check failed: {e}")
            return False

    def close(self) -> None:
        """Close the InfluxDB client connection."""
        if self.client:
            try:
                self.client.close()
                logger.debug("Closed InfluxDB client connection")
            except Exception as e:
                logger.warning(f"Error closing InfluxDB client: {e}")
            self.client = None
