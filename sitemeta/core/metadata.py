# sitemeta/core/metadata.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from .exceptions import InvalidRecord
from .span import Span


def _require_str(owner: str, **values: Any) -> None:
    for name, value in values.items():
        if not isinstance(value, str):
            raise InvalidRecord(f"{owner}.{name} must be a string, got {type(value).__name__}.")


def _require_int(owner: str, **values: Any) -> None:
    for name, value in values.items():
        if not isinstance(value, int) or isinstance(value, bool):
            raise InvalidRecord(f"{owner}.{name} must be an int, got {type(value).__name__}.")


def _require_finite(owner: str, **values: Any) -> None:
    for name, value in values.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvalidRecord(f"{owner}.{name} must be a finite number, got {value!r}.")


def _require_span(owner: str, span: Any) -> None:
    if not isinstance(span, Span):
        raise InvalidRecord(f"{owner}.span must be a Span instance.")


def _normalize_attrs(record: Any, owner: str) -> None:
    if record.attrs is None:
        object.__setattr__(record, "attrs", {})
    elif not isinstance(record.attrs, dict):
        raise InvalidRecord(f"{owner}.attrs must be a dict.")


# ---- collaborator value objects ----
@dataclass(frozen=True, slots=True)
class Site:
    """A physical recording point: station code plus location code."""
    station: str
    location: str

    def __post_init__(self) -> None:
        _require_str("Site", station=self.station, location=self.location)


@dataclass(frozen=True, slots=True)
class Polarity:
    """
    Polarity of a recorded stream.

    Only a primary, reversed polarity changes derived orientation.
    """
    primary: bool = False
    reversed: bool = False


# ---- equipment ----
@dataclass(frozen=True, slots=True)
class Equipment:
    make: str
    model: str
    serial: str

    def __post_init__(self) -> None:
        _require_str("Equipment", make=self.make, model=self.model, serial=self.serial)


@dataclass(frozen=True, slots=True)
class Install:
    """A unit of equipment together with the span it was in service."""
    equipment: Equipment
    span: Span

    def __post_init__(self) -> None:
        if not isinstance(self.equipment, Equipment):
            raise InvalidRecord("Install.equipment must be an Equipment instance.")
        _require_span("Install", self.span)

    @property
    def make(self) -> str:
        return self.equipment.make

    @property
    def model(self) -> str:
        return self.equipment.model

    @property
    def serial(self) -> str:
        return self.equipment.serial


@dataclass(frozen=True, slots=True)
class InstalledSensor:
    """
    A sensor unit physically present at a station/location.

    Orientation fields describe how the sensor was placed:
    - azimuth: rotation of the sensor's north axis from true north (degrees)
    - dip: tilt of the installation (degrees)
    - method: how the orientation was measured (compass, gyro, ...)
    - vertical/north/east: offsets from the site reference point (metres)
    """
    station: str
    location: str
    equipment: Equipment
    span: Span
    azimuth: float = 0.0
    dip: float = 0.0
    method: str = ""
    vertical: float = 0.0
    north: float = 0.0
    east: float = 0.0
    attrs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        _require_str(
            "InstalledSensor",
            station=self.station,
            location=self.location,
            method=self.method,
        )
        if not isinstance(self.equipment, Equipment):
            raise InvalidRecord("InstalledSensor.equipment must be an Equipment instance.")
        _require_span("InstalledSensor", self.span)
        _require_finite(
            "InstalledSensor",
            azimuth=self.azimuth,
            dip=self.dip,
            vertical=self.vertical,
            north=self.north,
            east=self.east,
        )
        _normalize_attrs(self, "InstalledSensor")

    @property
    def make(self) -> str:
        return self.equipment.make

    @property
    def model(self) -> str:
        return self.equipment.model

    @property
    def serial(self) -> str:
        return self.equipment.serial


@dataclass(frozen=True, slots=True)
class InstalledRecorder:
    """
    A sensor and datalogger bundled into a single deployed unit.

    The datalogger shares the sensor's make and serial; only its model
    differs.
    """
    sensor: InstalledSensor
    datalogger_model: str

    def __post_init__(self) -> None:
        if not isinstance(self.sensor, InstalledSensor):
            raise InvalidRecord("InstalledRecorder.sensor must be an InstalledSensor instance.")
        _require_str("InstalledRecorder", datalogger_model=self.datalogger_model)

    @property
    def station(self) -> str:
        return self.sensor.station

    @property
    def location(self) -> str:
        return self.sensor.location

    @property
    def make(self) -> str:
        return self.sensor.make

    @property
    def model(self) -> str:
        return self.sensor.model

    @property
    def serial(self) -> str:
        return self.sensor.serial

    @property
    def span(self) -> Span:
        return self.sensor.span


@dataclass(frozen=True, slots=True)
class DeployedDatalogger:
    """A datalogger unit deployed at a named place, in a given role."""
    place: str
    role: str
    install: Install
    attrs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        _require_str("DeployedDatalogger", place=self.place, role=self.role)
        if not isinstance(self.install, Install):
            raise InvalidRecord("DeployedDatalogger.install must be an Install instance.")
        _normalize_attrs(self, "DeployedDatalogger")

    @property
    def equipment(self) -> Equipment:
        return self.install.equipment

    @property
    def make(self) -> str:
        return self.install.make

    @property
    def model(self) -> str:
        return self.install.model

    @property
    def serial(self) -> str:
        return self.install.serial

    @property
    def span(self) -> Span:
        return self.install.span


@dataclass(frozen=True, slots=True)
class Connection:
    """
    Physical routing of a station/location to a datalogger place/role.

    `number` is the channel offset applied when matching sensor components
    to datalogger channels through this connection.
    """
    station: str
    location: str
    place: str
    role: str
    number: int
    span: Span
    attrs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        _require_str(
            "Connection",
            station=self.station,
            location=self.location,
            place=self.place,
            role=self.role,
        )
        _require_int("Connection", number=self.number)
        _require_span("Connection", self.span)
        _normalize_attrs(self, "Connection")


# ---- streams, components, channels ----
@dataclass(frozen=True, slots=True)
class Stream:
    """
    A logical recording stream at a station/location.

    `axial` is a textual flag ("true"/"yes", any case) marking streams whose
    horizontal subsource codes are numbered (N -> 1, E -> 2).
    """
    station: str
    location: str
    band: str
    source: str
    axial: str
    sampling_rate: float
    span: Span
    attrs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        _require_str(
            "Stream",
            station=self.station,
            location=self.location,
            band=self.band,
            source=self.source,
            axial=self.axial,
        )
        _require_finite("Stream", sampling_rate=self.sampling_rate)
        _require_span("Stream", self.span)
        _normalize_attrs(self, "Stream")

    @property
    def is_axial(self) -> bool:
        return self.axial.lower() in {"true", "yes"}


@dataclass(frozen=True, slots=True)
class Component:
    """One measurement axis of a sensor model."""
    make: str
    model: str
    number: int
    subsource: str
    dip: float = 0.0
    azimuth: float = 0.0
    attrs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        _require_str("Component", make=self.make, model=self.model, subsource=self.subsource)
        _require_int("Component", number=self.number)
        _require_finite("Component", dip=self.dip, azimuth=self.azimuth)
        _normalize_attrs(self, "Component")


@dataclass(frozen=True, slots=True)
class Channel:
    """One recording channel of a datalogger model."""
    make: str
    model: str
    number: int
    sampling_rate: float
    attrs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        _require_str("Channel", make=self.make, model=self.model)
        _require_int("Channel", number=self.number)
        _require_finite("Channel", sampling_rate=self.sampling_rate)
        _normalize_attrs(self, "Channel")


# ---- gains and calibrations ----
@dataclass(frozen=True, slots=True)
class Gain:
    """Amplification applied to one subsource of a station/location."""
    station: str
    location: str
    subsource: str
    span: Span
    scale_factor: float = 1.0
    scale_bias: float = 0.0
    absolute_bias: float = 0.0
    attrs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        _require_str(
            "Gain",
            station=self.station,
            location=self.location,
            subsource=self.subsource,
        )
        _require_span("Gain", self.span)
        _normalize_attrs(self, "Gain")


@dataclass(frozen=True, slots=True)
class Calibration:
    """
    Response calibration of one equipment unit.

    `number` is the sensor component or datalogger channel it applies to.
    """
    make: str
    model: str
    serial: str
    number: int
    span: Span
    scale_factor: float = 1.0
    scale_bias: float = 0.0
    scale_absolute: float = 0.0
    frequency: float | None = None
    attrs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        _require_str("Calibration", make=self.make, model=self.model, serial=self.serial)
        _require_int("Calibration", number=self.number)
        _require_span("Calibration", self.span)
        _normalize_attrs(self, "Calibration")
