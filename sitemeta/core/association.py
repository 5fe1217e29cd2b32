# sitemeta/core/association.py
from __future__ import annotations

from typing import Callable, Iterable, Protocol, TypeVar

from .metadata import Calibration, Gain
from .span import Span


class SpannedLike(Protocol):
    span: Span


R = TypeVar("R", bound=SpannedLike)


def collect(
    records: Iterable[R],
    span: Span,
    match: Callable[[R], bool],
) -> list[R]:
    """
    Gather the records accepted by `match` whose span overlaps `span`.

    Survivors are ordered by span start; records starting at the same
    instant keep their registry order.
    """
    kept = [r for r in records if match(r) and span.overlaps(r.span)]
    return sorted(kept, key=lambda r: r.span.start)


def collect_gains(
    gains: Iterable[Gain],
    span: Span,
    *,
    station: str,
    location: str,
    subsource: str,
) -> list[Gain]:
    return collect(
        gains,
        span,
        lambda g: (
            g.station == station
            and g.location == location
            and g.subsource == subsource
        ),
    )


def collect_calibrations(
    calibrations: Iterable[Calibration],
    span: Span,
    *,
    make: str,
    model: str,
    serial: str,
    number: int,
) -> list[Calibration]:
    """Calibrations of one equipment unit for a component or channel number."""
    return collect(
        calibrations,
        span,
        lambda c: (
            c.make == make
            and c.model == model
            and c.serial == serial
            and c.number == number
        ),
    )
