"""Tests for the coordinate collision resolver."""

import math

import pytest

from globe_pipeline.models import EnrichedEvent
from globe_pipeline.normalizers.coordinates import (
    OFFSET_RADIUS,
    coordinate_key,
    fan_out,
    resolve_collisions,
)


def event(event_id: int, lat, lon) -> EnrichedEvent:
    return EnrichedEvent(id=event_id, lat=lat, lon=lon)


class TestResolveCollisions:
    """Tests for fanning out events that share a point."""

    def test_two_events_same_point(self):
        """Both events end up one radius from the shared centre and apart from each other."""
        center_lat, center_lon = 40.000011, -74.000011
        events = [event(1, center_lat, center_lon), event(2, 40.000014, -74.000014)]
        assert coordinate_key(40.000011, -74.000011) == coordinate_key(40.000014, -74.000014)

        resolve_collisions(events)

        first, second = events
        assert (first.lat, first.lon) != (second.lat, second.lon)
        for moved in events:
            lat_offset = moved.lat - center_lat
            lon_offset = (moved.lon - center_lon) * math.cos(math.radians(center_lat))
            assert math.hypot(lat_offset, lon_offset) == pytest.approx(OFFSET_RADIUS)
        assert coordinate_key(first.lat, first.lon) != coordinate_key(second.lat, second.lon)

    @pytest.mark.parametrize("count", [2, 3, 5, 12])
    def test_group_members_all_distinct(self, count: int):
        events = [event(i, 51.5074, -0.1278) for i in range(count)]
        resolve_collisions(events)
        keys = {coordinate_key(e.lat, e.lon) for e in events}
        assert len(keys) == count

    def test_null_coordinates_unchanged(self):
        events = [event(1, None, None), event(2, 10.0, None), event(3, None, 10.0), event(4, None, None)]
        resolve_collisions(events)
        assert [(e.lat, e.lon) for e in events] == [(None, None), (10.0, None), (None, 10.0), (None, None)]

    def test_singletons_unchanged(self):
        events = [event(1, 48.8566, 2.3522), event(2, 52.52, 13.405)]
        resolve_collisions(events)
        assert [(e.lat, e.lon) for e in events] == [(48.8566, 2.3522), (52.52, 13.405)]

    def test_zero_is_a_real_coordinate(self):
        """Events at (0, 0) collide like any other point."""
        events = [event(1, 0.0, 0.0), event(2, 0.0, 0.0)]
        resolve_collisions(events)
        assert events[0].lat == pytest.approx(OFFSET_RADIUS)
        assert events[1].lat == pytest.approx(-OFFSET_RADIUS)

    def test_order_and_identity_preserved(self):
        events = [event(1, 30.0, 31.0), event(2, None, None), event(3, 30.0, 31.0), event(4, 1.0, 2.0)]
        originals = list(events)

        result = resolve_collisions(events)

        assert result is events
        assert [e.id for e in result] == [1, 2, 3, 4]
        assert all(a is b for a, b in zip(result, originals))

    def test_separate_groups_resolved_independently(self):
        events = [event(1, 10.0, 10.0), event(2, 20.0, 20.0), event(3, 10.0, 10.0), event(4, 20.0, 20.0)]
        resolve_collisions(events)
        assert events[0].lat == pytest.approx(10.0 + OFFSET_RADIUS)
        assert events[1].lat == pytest.approx(20.0 + OFFSET_RADIUS)
        assert events[2].lat == pytest.approx(10.0 - OFFSET_RADIUS)
        assert events[3].lat == pytest.approx(20.0 - OFFSET_RADIUS)

    def test_custom_radius(self):
        events = [event(1, 0.0, 0.0), event(2, 0.0, 0.0)]
        resolve_collisions(events, radius=0.5)
        assert events[0].lat == pytest.approx(0.5)

    def test_empty_batch(self):
        assert resolve_collisions([]) == []


class TestFanOut:
    """Tests for circle placement."""

    def test_first_member_due_north(self):
        assert fan_out(10.0, 20.0, 0, 4) == pytest.approx((10.0 + OFFSET_RADIUS, 20.0))

    def test_longitude_stretched_by_latitude(self):
        lat, lon = fan_out(60.0, 0.0, 1, 4)
        assert lat == pytest.approx(60.0)
        assert lon == pytest.approx(OFFSET_RADIUS / math.cos(math.radians(60.0)))

    def test_coordinate_key_rounds(self):
        assert coordinate_key(1.234564, 2.0) == "1.23456_2.00000"
