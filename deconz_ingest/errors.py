#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: errors.py
# Author: Rajaram Lakshmanan
# Description: Exception hierarchy of the deCONZ sensor ingest pipeline.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------


class DeconzIngestError(Exception):
    """Base class for all errors raised by the ingest pipeline."""


# === Configuration errors (fatal, surfaced to the caller of start) ===

class ConfigurationError(DeconzIngestError):
    """The pipeline was wired or started incorrectly."""


class MisconfiguredReaderError(ConfigurationError, ValueError):
    """A required collaborator (sensor lookup or event reader) is missing."""


class AlreadyRunningError(ConfigurationError, RuntimeError):
    """The sensor event reader has already been started."""


# === Transport errors ===

class EventReadError(DeconzIngestError):
    """
    Error raised while reading an event from the gateway.

    The recoverable flag tells the event loop whether only the current event
    is lost (recoverable) or the connection itself (not recoverable).
    """

    def __init__(self, message: str, recoverable: bool = False):
        super().__init__(message)
        self.recoverable = recoverable


class RecoverableEventError(EventReadError):
    """A single event could not be parsed; the connection is still usable."""

    def __init__(self, message: str):
        super().__init__(message, recoverable=True)


class EventConnectionError(EventReadError, ConnectionError):
    """The connection to the gateway could not be established or was lost."""

    def __init__(self, message: str):
        super().__init__(message, recoverable=False)


# === Lookup errors ===

class SensorNotFoundError(DeconzIngestError, LookupError):
    """No sensor is known for the requested id."""

    def __init__(self, sensor_id: int):
        super().__init__(f"No sensor with id {sensor_id}")
        self.sensor_id = sensor_id


# === Decode errors ===

class DecodeError(DeconzIngestError, ValueError):
    """The raw state payload could not be decoded into a sensor state."""


class UnknownSensorTypeError(DecodeError):
    """The sensor type string has no state variant."""

    def __init__(self, sensor_type: str):
        super().__init__(f"{sensor_type} is not a known sensor type")
        self.sensor_type = sensor_type


class MalformedPayloadError(DecodeError):
    """The payload does not match the structure of the sensor type's state."""


# === Derivation errors (surfaced to the sink, which skips the point) ===

class DerivationError(DeconzIngestError):
    """Tags and fields could not be derived for a sensor state."""


class NoTimeseriesDataError(DerivationError):
    """The sensor state has no measurable fields."""


class IncompleteThermostatConfigError(DerivationError):
    """A thermostat is missing one of the config values required for its fields."""
