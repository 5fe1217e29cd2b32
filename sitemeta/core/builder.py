# sitemeta/core/builder.py
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable, Protocol, Sequence, TypeVar, runtime_checkable

from .association import collect_calibrations, collect_gains
from .collection import Collection, sort_collections
from .metadata import (
    Calibration,
    Channel,
    Component,
    Connection,
    DeployedDatalogger,
    Equipment,
    Gain,
    Install,
    InstalledRecorder,
    InstalledSensor,
    Site,
    Stream,
)

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class RegistryLike(Protocol):
    """
    Read-only access to every metadata record of a deployment history.

    Accessors are not filtered to a site and carry no ordering guarantee.
    """

    def installed_recorders(self) -> Sequence[InstalledRecorder]: ...

    def installed_sensors(self) -> Sequence[InstalledSensor]: ...

    def deployed_dataloggers(self) -> Sequence[DeployedDatalogger]: ...

    def connections(self) -> Sequence[Connection]: ...

    def streams(self) -> Sequence[Stream]: ...

    def components(self) -> Sequence[Component]: ...

    def channels(self) -> Sequence[Channel]: ...

    def gains(self) -> Sequence[Gain]: ...

    def calibrations(self) -> Sequence[Calibration]: ...


M = TypeVar("M", Component, Channel)


def _index_by_make_model(records: Iterable[M]) -> dict[tuple[str, str], list[M]]:
    # each bucket keeps registry order
    index: dict[tuple[str, str], list[M]] = defaultdict(list)
    for r in records:
        index[(r.make, r.model)].append(r)
    return index


def _site_streams(streams: Iterable[Stream], site: Site) -> list[Stream]:
    return [s for s in streams if s.station == site.station and s.location == site.location]


class _Snapshot:
    """Registry lists read once per build, plus make/model indexes."""

    def __init__(self, registry: RegistryLike):
        self.streams = list(registry.streams())
        self.gains = list(registry.gains())
        self.calibrations = list(registry.calibrations())
        self.components = _index_by_make_model(registry.components())
        self.channels = _index_by_make_model(registry.channels())
        self.installed_recorders = list(registry.installed_recorders())
        self.installed_sensors = list(registry.installed_sensors())
        self.deployed_dataloggers = list(registry.deployed_dataloggers())
        self.connections = list(registry.connections())


# ----------------------------------------------------------------------
# Path A: sensor and datalogger bundled in one recorder
# ----------------------------------------------------------------------
def _recorder_collections(snap: _Snapshot, site: Site) -> list[Collection]:
    collections: list[Collection] = []
    streams = _site_streams(snap.streams, site)

    for recorder in snap.installed_recorders:
        if recorder.station != site.station or recorder.location != site.location:
            continue

        datalogger = DeployedDatalogger(
            place="",
            role="",
            install=Install(
                equipment=Equipment(
                    make=recorder.make,
                    model=recorder.datalogger_model,
                    serial=recorder.serial,
                ),
                span=recorder.span,
            ),
        )

        for stream in streams:
            span = recorder.span.extent(stream.span)
            if span is None:
                continue

            for component in snap.components.get((recorder.make, recorder.model), ()):
                gains = collect_gains(
                    snap.gains,
                    span,
                    station=stream.station,
                    location=stream.location,
                    subsource=component.subsource,
                )
                sensors = collect_calibrations(
                    snap.calibrations,
                    span,
                    make=recorder.make,
                    model=recorder.model,
                    serial=recorder.serial,
                    number=component.number,
                )

                for channel in snap.channels.get((recorder.make, recorder.datalogger_model), ()):
                    if channel.sampling_rate != stream.sampling_rate:
                        continue

                    dataloggers = collect_calibrations(
                        snap.calibrations,
                        span,
                        make=recorder.make,
                        model=recorder.datalogger_model,
                        serial=recorder.serial,
                        number=channel.number,
                    )

                    collections.append(
                        Collection(
                            span=span,
                            stream=stream,
                            channel=channel,
                            component=component,
                            installed_sensor=recorder.sensor,
                            deployed_datalogger=datalogger,
                            gains=gains,
                            sensor_calibrations=sensors,
                            datalogger_calibrations=dataloggers,
                        )
                    )

    return collections


# ----------------------------------------------------------------------
# Path B: sensor and datalogger joined through a connection
# ----------------------------------------------------------------------
def _connection_collections(snap: _Snapshot, site: Site) -> list[Collection]:
    collections: list[Collection] = []
    streams = _site_streams(snap.streams, site)
    sensors_at_site = [
        s
        for s in snap.installed_sensors
        if s.station == site.station and s.location == site.location
    ]
    dataloggers = snap.deployed_dataloggers

    for connection in snap.connections:
        if connection.station != site.station or connection.location != site.location:
            continue

        for sensor in sensors_at_site:
            for datalogger in dataloggers:
                if datalogger.place != connection.place or datalogger.role != connection.role:
                    continue

                installed = connection.span.extent(sensor.span, datalogger.span)
                if installed is None:
                    continue

                for stream in streams:
                    span = installed.extent(stream.span)
                    if span is None:
                        continue

                    for component in snap.components.get((sensor.make, sensor.model), ()):
                        gains = collect_gains(
                            snap.gains,
                            span,
                            station=stream.station,
                            location=stream.location,
                            subsource=component.subsource,
                        )
                        sensor_calibrations = collect_calibrations(
                            snap.calibrations,
                            span,
                            make=sensor.make,
                            model=sensor.model,
                            serial=sensor.serial,
                            number=component.number,
                        )

                        for channel in snap.channels.get((datalogger.make, datalogger.model), ()):
                            # a connection may route up to `number` channels past the component
                            if component.number + connection.number < channel.number:
                                continue
                            if channel.sampling_rate != stream.sampling_rate:
                                continue

                            datalogger_calibrations = collect_calibrations(
                                snap.calibrations,
                                span,
                                make=datalogger.make,
                                model=datalogger.model,
                                serial=datalogger.serial,
                                number=channel.number,
                            )

                            collections.append(
                                Collection(
                                    span=span,
                                    stream=stream,
                                    channel=channel,
                                    component=component,
                                    installed_sensor=sensor,
                                    deployed_datalogger=datalogger,
                                    gains=gains,
                                    sensor_calibrations=sensor_calibrations,
                                    datalogger_calibrations=datalogger_calibrations,
                                )
                            )

    return collections


def build_collections(
    registry: RegistryLike,
    site: Site,
    *,
    recorders: bool = True,
    connections: bool = True,
) -> list[Collection]:
    """
    Build every Collection active at `site`, in canonical order.

    Parameters
    ----------
    registry:
        Snapshot of the whole deployment history.
    site:
        Station/location to reconstruct.
    recorders, connections:
        Enable the bundled-recorder join and the connection-routed join.
        Both are on by default.

    Records that do not match, or whose spans do not all overlap, are
    simply left out; this never raises for well-formed records.
    """
    LOGGER.debug("building collections for %s/%s", site.station, site.location)
    snap = _Snapshot(registry)

    collections: list[Collection] = []
    if recorders:
        found = _recorder_collections(snap, site)
        LOGGER.debug("%d recorder collections for %s/%s", len(found), site.station, site.location)
        collections.extend(found)
    if connections:
        found = _connection_collections(snap, site)
        LOGGER.debug("%d connection collections for %s/%s", len(found), site.station, site.location)
        collections.extend(found)

    ordered = sort_collections(collections)
    LOGGER.debug("%d collections for %s/%s", len(ordered), site.station, site.location)
    return ordered
