# test/test_builder.py
from datetime import datetime

import pytest

from sitemeta.core import (
    Span,
    Site,
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
    RegistryLike,
    build_collections,
)
from sitemeta.io.registry import MemoryRegistry


SITE = Site(station="ABC", location="01")


def _span(a: int, b: int) -> Span:
    return Span(start=datetime(a, 1, 1), end=datetime(b, 1, 1))


def _stream(a=2001, b=2009, sampling_rate=100.0, station="ABC", location="01", axial="false"):
    return Stream(
        station=station, location=location, band="H", source="H",
        axial=axial, sampling_rate=sampling_rate, span=_span(a, b),
    )


def _recorder(a=2000, b=2010, station="ABC", location="01"):
    return InstalledRecorder(
        sensor=InstalledSensor(
            station=station,
            location=location,
            equipment=Equipment(make="X", model="Y", serial="1"),
            span=_span(a, b),
        ),
        datalogger_model="Z",
    )


def _recorder_registry(**kw) -> MemoryRegistry:
    args = dict(
        installed_recorders=[_recorder()],
        streams=[_stream()],
        components=[Component(make="X", model="Y", number=1, subsource="Z", dip=0.0, azimuth=90.0)],
        channels=[Channel(make="X", model="Z", number=1, sampling_rate=100.0)],
    )
    args.update(kw)
    return MemoryRegistry(**args)


# ----------------------------------------------------------------------
# bundled recorders
# ----------------------------------------------------------------------
def test_recorder_basic_join():
    out = build_collections(_recorder_registry(), SITE)

    assert len(out) == 1
    c = out[0]
    assert c.span == _span(2001, 2009)
    assert c.code() == "HHZ"
    assert c.azimuth(None) == 90.0
    assert c.dip(None) == 0.0


def test_recorder_synthesizes_datalogger():
    c = build_collections(_recorder_registry(), SITE)[0]

    assert c.installed_sensor == _recorder().sensor
    d = c.deployed_datalogger
    assert d.equipment == Equipment(make="X", model="Z", serial="1")
    # recorder's own span, not the narrowed one
    assert d.span == _span(2000, 2010)
    assert (d.place, d.role) == ("", "")


def test_recorder_no_overlap_gives_nothing():
    reg = _recorder_registry(installed_recorders=[_recorder(1990, 1995)])
    assert build_collections(reg, SITE) == []


def test_recorder_other_site_gives_nothing():
    assert build_collections(_recorder_registry(), Site(station="ABC", location="02")) == []
    assert build_collections(_recorder_registry(), Site(station="XYZ", location="01")) == []


def test_recorder_stream_at_other_site_ignored():
    reg = _recorder_registry(streams=[_stream(location="02")])
    assert build_collections(reg, SITE) == []


def test_recorder_sampling_rate_must_match():
    reg = _recorder_registry(
        channels=[
            Channel(make="X", model="Z", number=1, sampling_rate=50.0),
            Channel(make="X", model="Z", number=2, sampling_rate=100.0),
        ]
    )
    out = build_collections(reg, SITE)
    assert [c.channel.number for c in out] == [2]


def test_recorder_channel_must_match_datalogger_model():
    reg = _recorder_registry(channels=[Channel(make="X", model="Y", number=1, sampling_rate=100.0)])
    assert build_collections(reg, SITE) == []


def test_recorder_collects_gains_and_calibrations():
    reg = _recorder_registry(
        gains=[
            Gain(station="ABC", location="01", subsource="Z", span=_span(2005, 2020), scale_factor=2.0),
            Gain(station="ABC", location="01", subsource="Z", span=_span(1999, 2005), scale_factor=1.0),
            Gain(station="ABC", location="01", subsource="N", span=_span(1999, 2020)),
        ],
        calibrations=[
            Calibration(make="X", model="Y", serial="1", number=1, span=_span(2000, 2020), scale_factor=3.0),
            Calibration(make="X", model="Z", serial="1", number=1, span=_span(2000, 2020), scale_factor=4.0),
            Calibration(make="X", model="Z", serial="2", number=1, span=_span(2000, 2020)),
            Calibration(make="X", model="Y", serial="1", number=1, span=_span(1990, 2000)),
        ],
    )
    c = build_collections(reg, SITE)[0]

    assert [g.scale_factor for g in c.gains] == [1.0, 2.0]
    assert [s.scale_factor for s in c.sensor_calibrations] == [3.0]
    assert [d.scale_factor for d in c.datalogger_calibrations] == [4.0]


def test_recorder_multi_component_multi_rate_ordering():
    reg = _recorder_registry(
        streams=[_stream(sampling_rate=1.0), _stream(sampling_rate=100.0)],
        components=[
            Component(make="X", model="Y", number=2, subsource="E", azimuth=90.0),
            Component(make="X", model="Y", number=0, subsource="Z", dip=-90.0),
            Component(make="X", model="Y", number=1, subsource="N"),
        ],
        channels=[
            Channel(make="X", model="Z", number=0, sampling_rate=1.0),
            Channel(make="X", model="Z", number=0, sampling_rate=100.0),
        ],
    )
    out = build_collections(reg, SITE)

    assert len(out) == 6
    assert [(c.component.number, c.stream.sampling_rate) for c in out] == [
        (0, 100.0), (0, 1.0),
        (1, 100.0), (1, 1.0),
        (2, 100.0), (2, 1.0),
    ]
    for first, second in zip(out, out[1:]):
        assert not second.less(first)


# ----------------------------------------------------------------------
# connection-routed sensors and dataloggers
# ----------------------------------------------------------------------
def _connection_registry(*, connection_number=1, component_number=2, channel_numbers=(3, 4), **kw):
    args = dict(
        connections=[
            Connection(
                station="ABC", location="01", place="Vault", role="",
                number=connection_number, span=_span(2000, 2015),
            )
        ],
        installed_sensors=[
            InstalledSensor(
                station="ABC",
                location="01",
                equipment=Equipment(make="X", model="S", serial="10"),
                span=_span(2002, 2020),
                azimuth=5.0,
            )
        ],
        deployed_dataloggers=[
            DeployedDatalogger(
                place="Vault",
                role="",
                install=Install(equipment=Equipment(make="Q", model="Q330", serial="20"), span=_span(1995, 2012)),
            )
        ],
        streams=[_stream(2001, 2019)],
        components=[Component(make="X", model="S", number=component_number, subsource="Z")],
        channels=[Channel(make="Q", model="Q330", number=n, sampling_rate=100.0) for n in channel_numbers],
    )
    args.update(kw)
    return MemoryRegistry(**args)


def test_connection_offset_rule():
    out = build_collections(_connection_registry(), SITE)

    # 2 + 1 >= 3 is routed, 2 + 1 < 4 is not
    assert [c.channel.number for c in out] == [3]


def test_connection_offset_allows_lower_channels():
    out = build_collections(_connection_registry(channel_numbers=(1, 2, 3, 4)), SITE)
    assert [c.channel.number for c in out] == [1, 2, 3]


def test_connection_span_is_full_intersection():
    c = build_collections(_connection_registry(), SITE)[0]

    # connection 2000-2015, sensor 2002-2020, datalogger 1995-2012, stream 2001-2019
    assert c.span == _span(2002, 2012)
    assert c.installed_sensor.serial == "10"
    assert c.deployed_datalogger.serial == "20"
    assert c.deployed_datalogger.place == "Vault"
    assert c.azimuth() == 5.0


def test_connection_place_role_must_match():
    reg = _connection_registry(
        deployed_dataloggers=[
            DeployedDatalogger(
                place="Vault",
                role="secondary",
                install=Install(equipment=Equipment(make="Q", model="Q330", serial="20"), span=_span(1995, 2012)),
            )
        ]
    )
    assert build_collections(reg, SITE) == []


def test_connection_disjoint_datalogger_gives_nothing():
    reg = _connection_registry(
        deployed_dataloggers=[
            DeployedDatalogger(
                place="Vault",
                role="",
                install=Install(equipment=Equipment(make="Q", model="Q330", serial="20"), span=_span(2016, 2018)),
            )
        ]
    )
    assert build_collections(reg, SITE) == []


def test_connection_collects_datalogger_calibrations():
    reg = _connection_registry(
        calibrations=[
            Calibration(make="Q", model="Q330", serial="20", number=3, span=_span(2000, 2020), scale_factor=7.0),
            Calibration(make="Q", model="Q330", serial="20", number=4, span=_span(2000, 2020)),
            Calibration(make="X", model="S", serial="10", number=2, span=_span(2011, 2013), scale_factor=8.0),
            Calibration(make="X", model="S", serial="10", number=2, span=_span(2013, 2014)),
        ]
    )
    c = build_collections(reg, SITE)[0]

    assert [d.scale_factor for d in c.datalogger_calibrations] == [7.0]
    assert [s.scale_factor for s in c.sensor_calibrations] == [8.0]


# ----------------------------------------------------------------------
# both paths together
# ----------------------------------------------------------------------
def _mixed_registry() -> MemoryRegistry:
    # the connection half reuses the recorder stream
    return _recorder_registry().merge(_connection_registry(streams=[]))


def test_both_paths_are_combined_and_sorted():
    out = build_collections(_mixed_registry(), SITE)

    assert len(out) == 2
    assert [(c.component.number, c.channel.number) for c in out] == [(1, 1), (2, 3)]


def test_paths_can_be_disabled():
    reg = _mixed_registry()
    assert [c.channel.number for c in build_collections(reg, SITE, connections=False)] == [1]
    assert [c.channel.number for c in build_collections(reg, SITE, recorders=False)] == [3]
    assert build_collections(reg, SITE, recorders=False, connections=False) == []


def test_build_is_deterministic():
    reg = _mixed_registry()
    assert build_collections(reg, SITE) == build_collections(reg, SITE)


def test_build_does_not_depend_on_registry_order():
    reg = _recorder_registry(
        streams=[_stream(sampling_rate=1.0), _stream(sampling_rate=100.0)],
        channels=[
            Channel(make="X", model="Z", number=1, sampling_rate=100.0),
            Channel(make="X", model="Z", number=1, sampling_rate=1.0),
        ],
    )
    flipped = _recorder_registry(
        streams=list(reversed(reg.streams())),
        channels=list(reversed(reg.channels())),
    )
    assert build_collections(reg, SITE) == build_collections(flipped, SITE)


def test_empty_registry():
    assert build_collections(MemoryRegistry(), SITE) == []


class _ListRegistry:
    """Minimal duck-typed registry returning plain lists."""

    def __init__(self, reg: MemoryRegistry):
        self._reg = reg

    def __getattr__(self, name):
        return lambda: list(getattr(self._reg, name)())


def test_any_registry_like_object_is_accepted():
    assert isinstance(MemoryRegistry(), RegistryLike)
    reg = _ListRegistry(_recorder_registry())
    out = build_collections(reg, SITE)
    assert len(out) == 1


@pytest.mark.parametrize("site", [SITE, Site(station="ABC", location="")])
def test_result_is_a_fresh_list(site):
    reg = _recorder_registry()
    first = build_collections(reg, site)
    first.append(None)
    assert None not in build_collections(reg, site)
