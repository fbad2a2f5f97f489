#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: sensor_state_decoder.py
# Author: Rajaram Lakshmanan
# Description: Decodes a raw deCONZ state payload into the typed state of the
# given sensor type.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

import json
from types import MappingProxyType
from typing import Any, Mapping, Type, Union

from pydantic import ValidationError

from deconz_ingest.errors import MalformedPayloadError, UnknownSensorTypeError
from deconz_ingest.sensor.state.alarm_states import (CarbonMonoxideState, ClipPresenceState, FireState,
                                                     OpenCloseState, PresenceState, VibrationState,
                                                     WaterState)
from deconz_ingest.sensor.state.base_sensor_state import SensorState
from deconz_ingest.sensor.state.control_states import SwitchState, ThermostatState
from deconz_ingest.sensor.state.environment_states import (AirQualityState, DaylightState, HumidityState,
                                                           LightLevelState, PressureState, TemperatureState)
from deconz_ingest.sensor.state.power_states import BatteryState, ConsumptionState, PowerState

RawState = Union[bytes, str, Mapping[str, Any]]

# Closed set of supported sensor types; adding a type means adding its state model here
SENSOR_STATE_TYPES: Mapping[str, Type[SensorState]] = MappingProxyType({
    state_cls.sensor_type: state_cls for state_cls in (
        ClipPresenceState,
        DaylightState,
        AirQualityState,
        BatteryState,
        CarbonMonoxideState,
        ConsumptionState,
        FireState,
        HumidityState,
        LightLevelState,
        OpenCloseState,
        PowerState,
        PresenceState,
        PressureState,
        SwitchState,
        TemperatureState,
        ThermostatState,
        VibrationState,
        WaterState,
    )
})


def decode_sensor_state(raw_state: RawState, sensor_type: str) -> SensorState:
    """
    Decode the raw state of a sensor based on the given sensor type.

    Decoding is pure: no I/O, no unit conversion and no type coercion.

    Args:
        raw_state: The state as JSON (bytes or str) or as an already parsed mapping.
        sensor_type (str): The deCONZ sensor type, e.g. "ZHATemperature".

    Returns:
        SensorState: The state model registered for the sensor type.

    Raises:
        UnknownSensorTypeError: If no state model is registered for the sensor type.
        MalformedPayloadError: If the payload does not match the state model.
    """
    state_cls = SENSOR_STATE_TYPES.get(sensor_type)
    if state_cls is None:
        raise UnknownSensorTypeError(sensor_type)

    if isinstance(raw_state, (bytes, bytearray, str)):
        try:
            raw_state = json.loads(raw_state)
        except ValueError as e:
            raise MalformedPayloadError(f"State of {sensor_type} is not valid JSON: {e}") from e

    if not isinstance(raw_state, Mapping):
        raise MalformedPayloadError(
            f"State of {sensor_type} must be an object, got {type(raw_state).__name__}")

    try:
        return state_cls.model_validate(dict(raw_state))
    except ValidationError as e:
        raise MalformedPayloadError(f"Invalid state for {sensor_type}: {e}") from e
