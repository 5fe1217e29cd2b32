# sitemeta/core/__init__.py
"""
Core domain objects for sitemeta.

This module defines the metadata model and the temporal join engine:
- Span: closed validity interval with overlap/intersection
- metadata records: sensors, dataloggers, connections, streams,
  components, channels, gains, calibrations
- Collection: one joined sensor/datalogger/stream/channel configuration
- build_collections: reconstructs every Collection active at a Site

The core layer is independent from I/O and storage formats.
"""

from .span import Span
from .metadata import (
    Site,
    Polarity,
    Equipment,
    Install,
    InstalledSensor,
    InstalledRecorder,
    DeployedDatalogger,
    Connection,
    Stream,
    Component,
    Channel,
    Gain,
    Calibration,
)
from .association import collect, collect_gains, collect_calibrations
from .collection import Collection, compare_collections, sort_collections
from .builder import RegistryLike, build_collections
from .exceptions import (
    CoreError,
    InvalidSpan,
    InvalidRecord,
    InvalidRegistry,
)


__all__ = [
    # interval model
    "Span",

    # collaborator value objects
    "Site",
    "Polarity",

    # metadata records
    "Equipment",
    "Install",
    "InstalledSensor",
    "InstalledRecorder",
    "DeployedDatalogger",
    "Connection",
    "Stream",
    "Component",
    "Channel",
    "Gain",
    "Calibration",

    # join engine
    "collect",
    "collect_gains",
    "collect_calibrations",
    "Collection",
    "compare_collections",
    "sort_collections",
    "RegistryLike",
    "build_collections",

    # exceptions
    "CoreError",
    "InvalidSpan",
    "InvalidRecord",
    "InvalidRegistry",
]
