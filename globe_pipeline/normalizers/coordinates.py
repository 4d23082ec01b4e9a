"""Coordinate collision resolver for globe markers.

GDELT geocodes many events to the same city centroid. Events sharing a point
are fanned out on a small circle so each marker stays clickable.
"""

import math
from collections import defaultdict
from typing import Optional, Protocol, Sequence, TypeVar

# Offset radius in degrees (~110 m of latitude)
OFFSET_RADIUS = 0.001

# Decimal places two coordinates must agree on to count as the same point
COLLISION_PRECISION = 5


class HasCoordinates(Protocol):
    lat: Optional[float]
    lon: Optional[float]


T = TypeVar("T", bound=HasCoordinates)


def coordinate_key(lat: float, lon: float, precision: int = COLLISION_PRECISION) -> str:
    """Grouping key: both coordinates rounded to `precision` decimals."""
    return f"{lat:.{precision}f}_{lon:.{precision}f}"


def fan_out(lat: float, lon: float, index: int, count: int, radius: float = OFFSET_RADIUS) -> tuple[float, float]:
    """Position of member `index` of `count` on a circle around (lat, lon).

    Longitude offsets are stretched by 1/cos(lat) so spacing is roughly even
    on the ground rather than in degrees.
    """
    angle = 2 * math.pi * index / count
    new_lat = lat + radius * math.cos(angle)
    new_lon = lon + radius * math.sin(angle) / math.cos(math.radians(lat))
    return new_lat, new_lon


def resolve_collisions(events: Sequence[T], radius: float = OFFSET_RADIUS) -> Sequence[T]:
    """Spread out events whose coordinates collide.

    Events are grouped by coordinates rounded to 5 decimals. In every group
    with more than one member, members are placed evenly on a circle of
    `radius` degrees centred on the first member's original position.
    Events without coordinates are left alone. Positions are updated in
    place; list order and event identity do not change.
    """
    groups: dict[str, list[T]] = defaultdict(list)
    for event in events:
        if event.lat is None or event.lon is None:
            continue
        groups[coordinate_key(event.lat, event.lon)].append(event)

    for group in groups.values():
        if len(group) < 2:
            continue
        base_lat, base_lon = group[0].lat, group[0].lon
        for index, event in enumerate(group):
            event.lat, event.lon = fan_out(base_lat, base_lon, index, len(group), radius)

    return events
