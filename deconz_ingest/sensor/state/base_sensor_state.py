#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: base_sensor_state.py
# Author: Rajaram Lakshmanan
# Description: Base model shared by all decoded deCONZ sensor states, and the
# empty state used when no state could be decoded.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

import logging
import re
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger("SensorState")


# Seconds, optional fraction and optional zone of an ISO 8601 timestamp
_ISO_TAIL = re.compile(r"(T\d{2}:\d{2}(?::\d{2})?)(?:\.(\d+))?(Z|z|[+-]\d{2}:\d{2})?$")


def normalize_iso_timestamp(value: str) -> str:
    """
    Rewrite a gateway timestamp into a form datetime.fromisoformat() accepts on
    every supported Python version: a trailing 'Z' becomes '+00:00' and the
    fraction of a second is padded or cut to microseconds.
    """
    def _rewrite(match: re.Match) -> str:
        time_part, fraction, zone = match.groups()
        if fraction is not None:
            time_part += "." + fraction[:6].ljust(6, "0")
        if zone in ("Z", "z"):
            zone = "+00:00"
        return time_part + (zone or "")

    return _ISO_TAIL.sub(_rewrite, value.strip())


def parse_gateway_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a timestamp reported by the gateway (e.g. "2018-03-08T19:35:24" or
    "2018-03-08T19:35:24.123Z").

    Args:
        value (str): Timestamp string, may be empty.

    Returns:
        datetime: Timezone-aware timestamp (UTC when the string carries no zone),
        or None if the value is empty or cannot be parsed.
    """
    if not value:
        return None

    try:
        parsed = datetime.fromisoformat(normalize_iso_timestamp(value))
    except ValueError:
        logger.warning(f"Failed to parse gateway timestamp '{value}'")
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def merge_fields(primary: Dict[str, Any], secondary: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge two field maps into a new map.

    If both maps contain a key, the value of the primary map is kept.
    """
    merged = dict(primary)
    for key, value in secondary.items():
        if key not in merged:
            merged[key] = value
    return merged


def present_fields(**values: Any) -> Dict[str, Any]:
    """Return the given keyword arguments without the ones that are None."""
    return {key: value for key, value in values.items() if value is not None}


class SensorState(BaseModel):
    """
    State properties reported by all sensors.

    Each concrete sensor type extends this model with its own measurements and
    names the deCONZ type string it decodes in ``sensor_type``.
    """
    sensor_type: ClassVar[str] = ""

    last_updated: Optional[str] = Field(default="", alias="lastupdated")

    def measurements(self) -> Dict[str, Any]:
        """Return the type-specific measurement fields; absent values are omitted."""
        return {}

    def age_fields(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Return the age of the state in seconds (now - last_updated).

        The field is omitted when last_updated is empty or cannot be parsed.
        """
        last_updated = parse_gateway_timestamp(self.last_updated)
        if last_updated is None:
            return {}

        now = now or datetime.now(timezone.utc)
        return {"age_secs": int((now - last_updated).total_seconds())}

    def fields(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Return the time series fields of the state.

        Args:
            now (datetime): Reference time for the age calculation (default = now).

        Returns:
            dict: Measurement fields merged with the shared age field.
        """
        return merge_fields(self.age_fields(now), self.measurements())

    model_config = {
        "extra": "ignore",
        "strict": True,
        "frozen": True,
        "populate_by_name": True
    }


class EmptyState(BaseModel):
    """Marker used when no state was received or the state could not be decoded."""

    model_config = {
        "frozen": True
    }
