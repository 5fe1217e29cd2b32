# sitemeta/core/collection.py
from __future__ import annotations

from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Iterable

import numpy as np

from .metadata import (
    Calibration,
    Channel,
    Component,
    DeployedDatalogger,
    Gain,
    InstalledSensor,
    Polarity,
    Stream,
)
from .span import Span


_AXIAL_SUBSOURCES = {"N": "1", "E": "2"}


def _is_reversed(polarity: Polarity | None) -> bool:
    return polarity is not None and polarity.primary and polarity.reversed


@dataclass(frozen=True, slots=True)
class Collection:
    """
    One valid sensor/datalogger/stream/channel configuration.

    `span` is the intersection of the spans of every record that
    contributed to the match. Gains and calibrations are ordered by start.
    """
    span: Span
    stream: Stream
    channel: Channel
    component: Component
    installed_sensor: InstalledSensor
    deployed_datalogger: DeployedDatalogger
    gains: tuple[Gain, ...] = field(default=(), repr=False)
    sensor_calibrations: tuple[Calibration, ...] = field(default=(), repr=False)
    datalogger_calibrations: tuple[Calibration, ...] = field(default=(), repr=False)

    def __post_init__(self) -> None:
        # accept any iterable, store tuples
        object.__setattr__(self, "gains", tuple(self.gains))
        object.__setattr__(self, "sensor_calibrations", tuple(self.sensor_calibrations))
        object.__setattr__(self, "datalogger_calibrations", tuple(self.datalogger_calibrations))

    # ---- ordering ----
    def less(self, other: "Collection") -> bool:
        """
        Whether this collection sorts before `other`.

        Ordered by station, location, component number, channel number and
        start time, then by the higher sampling rate first.
        """
        a = (
            self.installed_sensor.station,
            self.installed_sensor.location,
            self.component.number,
            self.channel.number,
        )
        b = (
            other.installed_sensor.station,
            other.installed_sensor.location,
            other.component.number,
            other.channel.number,
        )
        if a != b:
            return a < b
        if self.span.start != other.span.start:
            return self.span.start < other.span.start
        return self.stream.sampling_rate > other.stream.sampling_rate

    # ---- derived quantities ----
    def subsource(self) -> str:
        """Subsource code, with N/E remapped to 1/2 on axial streams."""
        if not self.stream.is_axial:
            return self.component.subsource
        return _AXIAL_SUBSOURCES.get(self.component.subsource.upper(), self.component.subsource)

    def code(self) -> str:
        """Channel code: band + source + subsource."""
        return self.stream.band + self.stream.source + self.subsource()

    def dip(self, polarity: Polarity | None = None) -> float:
        """
        Dip of the recorded stream in degrees from the horizontal, positive
        downwards. Horizontal components always report 0.0.
        """
        if self.component.dip == 0.0:
            return 0.0

        dip = float(self.component.dip)
        if _is_reversed(polarity):
            dip = -dip
        return dip

    def azimuth(self, polarity: Polarity | None = None) -> float:
        """
        Azimuth of the recorded stream in degrees from north, in [0, 360).
        Components with a non-zero dip always report 0.0.
        """
        if self.component.dip != 0.0:
            return 0.0

        azimuth = float(self.installed_sensor.azimuth + self.component.azimuth)
        if _is_reversed(polarity):
            azimuth += 180.0

        azimuth = float(np.mod(azimuth, 360.0))
        # a tiny negative input rounds up to exactly 360.0
        if azimuth >= 360.0:
            azimuth = 0.0
        return azimuth


def compare_collections(a: Collection, b: Collection) -> int:
    """Three-way comparator built on Collection.less."""
    if a.less(b):
        return -1
    if b.less(a):
        return 1
    return 0


def sort_collections(collections: Iterable[Collection]) -> list[Collection]:
    # sorted() is stable: ties keep their incoming order
    return sorted(collections, key=cmp_to_key(compare_collections))
