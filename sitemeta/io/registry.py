from __future__ import annotations

import logging
from typing import Any, Iterable

from sitemeta.core import (
    Calibration,
    Channel,
    Component,
    Connection,
    DeployedDatalogger,
    Gain,
    InstalledRecorder,
    InstalledSensor,
    InvalidRegistry,
    Site,
    Stream,
)

LOGGER = logging.getLogger(__name__)


# accessor name -> record type it returns
_RECORD_TYPES: dict[str, type] = {
    "installed_recorders": InstalledRecorder,
    "installed_sensors": InstalledSensor,
    "deployed_dataloggers": DeployedDatalogger,
    "connections": Connection,
    "streams": Stream,
    "components": Component,
    "channels": Channel,
    "gains": Gain,
    "calibrations": Calibration,
}


def _as_tuple(name: str, records: Iterable[Any] | None, kind: type) -> tuple[Any, ...]:
    if records is None:
        return ()
    if isinstance(records, (str, bytes)):
        raise InvalidRegistry(f"{name} must be an iterable of {kind.__name__}.")
    try:
        items = tuple(records)
    except TypeError as e:
        raise InvalidRegistry(f"{name} must be iterable.") from e
    for i, item in enumerate(items):
        if not isinstance(item, kind):
            raise InvalidRegistry(
                f"{name}[{i}] must be a {kind.__name__}, got {type(item).__name__}."
            )
    return items


class MemoryRegistry:
    """In-memory snapshot of a deployment history.

    Concrete implementation of RegistryLike for callers that already hold
    parsed records. Every iterable is copied to a tuple on construction,
    so later changes to the caller's lists never reach a running join.

    Accessors return records in construction order, but the join engine
    does not rely on it.
    """

    def __init__(
        self,
        *,
        installed_recorders: Iterable[InstalledRecorder] = (),
        installed_sensors: Iterable[InstalledSensor] = (),
        deployed_dataloggers: Iterable[DeployedDatalogger] = (),
        connections: Iterable[Connection] = (),
        streams: Iterable[Stream] = (),
        components: Iterable[Component] = (),
        channels: Iterable[Channel] = (),
        gains: Iterable[Gain] = (),
        calibrations: Iterable[Calibration] = (),
    ):
        given = {
            "installed_recorders": installed_recorders,
            "installed_sensors": installed_sensors,
            "deployed_dataloggers": deployed_dataloggers,
            "connections": connections,
            "streams": streams,
            "components": components,
            "channels": channels,
            "gains": gains,
            "calibrations": calibrations,
        }
        # accessor name -> frozen records
        self._records: dict[str, tuple[Any, ...]] = {
            name: _as_tuple(name, given[name], kind) for name, kind in _RECORD_TYPES.items()
        }
        LOGGER.debug(
            "registry snapshot: %s",
            ", ".join(f"{len(v)} {k}" for k, v in self._records.items()),
        )

    def __len__(self) -> int:
        return sum(len(v) for v in self._records.values())

    # ------------------------------------------------------------------
    # RegistryLike protocol implementation
    # ------------------------------------------------------------------
    def installed_recorders(self) -> tuple[InstalledRecorder, ...]:
        return self._records["installed_recorders"]

    def installed_sensors(self) -> tuple[InstalledSensor, ...]:
        return self._records["installed_sensors"]

    def deployed_dataloggers(self) -> tuple[DeployedDatalogger, ...]:
        return self._records["deployed_dataloggers"]

    def connections(self) -> tuple[Connection, ...]:
        return self._records["connections"]

    def streams(self) -> tuple[Stream, ...]:
        return self._records["streams"]

    def components(self) -> tuple[Component, ...]:
        return self._records["components"]

    def channels(self) -> tuple[Channel, ...]:
        return self._records["channels"]

    def gains(self) -> tuple[Gain, ...]:
        return self._records["gains"]

    def calibrations(self) -> tuple[Calibration, ...]:
        return self._records["calibrations"]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def sites(self) -> list[Site]:
        """Distinct station/location pairs, sorted.

        Taken from recorders, installed sensors, connections and streams.
        """
        seen: set[tuple[str, str]] = set()
        for name in ("installed_recorders", "installed_sensors", "connections", "streams"):
            for r in self._records[name]:
                seen.add((r.station, r.location))
        return [Site(station=station, location=location) for station, location in sorted(seen)]

    def merge(self, other: "MemoryRegistry") -> "MemoryRegistry":
        """Return a new snapshot holding the records of both (self first)."""
        if not isinstance(other, MemoryRegistry):
            raise InvalidRegistry("merge() expects a MemoryRegistry instance.")
        return MemoryRegistry(
            **{name: self._records[name] + other._records[name] for name in _RECORD_TYPES}
        )
