from __future__ import annotations

import math

import pytest

from helmlink.geodesy import to_local
from helmlink.models.geo import GeodeticPoint, LocalOffset
from helmlink.models.messages import AisContactMessage
from helmlink.models.track import ContactSnapshot
from helmlink.state.store import TrackStore

ORIGIN = GeodeticPoint(latitude=43.07, longitude=-70.71)


def _pt(lat: float, lon: float) -> GeodeticPoint:
    return GeodeticPoint(latitude=lat, longitude=lon)


def _report(mmsi: int, *, cog_deg: float, heading_deg: float, lat: float = 43.071, lon: float = -70.709) -> AisContactMessage:
    return AisContactMessage.model_validate(
        {
            "mmsi": mmsi,
            "name": "TUG ONE",
            "position": {"latitude": lat, "longitude": lon},
            "cog": math.radians(cog_deg),
            "heading": math.radians(heading_deg),
        }
    )


def test_append_before_origin_keeps_geodetic_only() -> None:
    store = TrackStore()
    local = store.append_ownship(_pt(43.071, -70.71))

    assert local is None
    assert len(store.location_history) == 1
    assert store.local_location_history == ()
    assert store.location == _pt(43.071, -70.71)


def test_origin_rebuilds_history_index_aligned() -> None:
    store = TrackStore()
    points = [_pt(43.07 + i * 0.0005, -70.71 + i * 0.0003) for i in range(5)]
    for point in points:
        store.append_ownship(point)

    assert store.set_origin(ORIGIN) is True

    local = store.local_location_history
    assert len(local) == len(store.location_history) == 5
    for geo, loc in zip(store.location_history, local, strict=True):
        expected = to_local(ORIGIN, geo)
        assert loc.east == pytest.approx(expected.east)
        assert loc.north == pytest.approx(expected.north)


def test_append_after_origin_projects_immediately() -> None:
    store = TrackStore()
    store.set_origin(ORIGIN)

    local = store.append_ownship(_pt(43.071, -70.71))

    assert local is not None
    assert local.north > 100.0
    assert store.local_location_history == (local,)


def test_same_origin_does_not_rebuild() -> None:
    store = TrackStore()
    assert store.set_origin(ORIGIN) is True
    assert store.set_origin(GeodeticPoint(latitude=43.07, longitude=-70.71)) is False


def test_origin_change_reprojects_existing_points() -> None:
    store = TrackStore()
    store.set_origin(ORIGIN)
    store.append_ownship(_pt(43.071, -70.71))
    first = store.local_location_history[0]

    store.set_origin(_pt(43.071, -70.71))

    moved = store.local_location_history[0]
    assert math.hypot(moved.east, moved.north) < 1e-6
    assert first.north > 100.0


def test_heading_is_scalar() -> None:
    store = TrackStore()
    store.set_heading(12.5)
    store.set_heading(270.0)
    assert store.heading == 270.0
    assert store.location_history == ()


def test_first_sighting_uses_course_over_ground() -> None:
    store = TrackStore()
    snapshot = store.ingest_contact_report(_report(366999001, cog_deg=45.0, heading_deg=90.0))
    assert snapshot.heading == pytest.approx(45.0)


def test_later_sighting_prefers_reported_heading() -> None:
    store = TrackStore()
    store.ingest_contact_report(_report(366999001, cog_deg=45.0, heading_deg=90.0))
    second = store.ingest_contact_report(_report(366999001, cog_deg=50.0, heading_deg=95.0))

    assert second.heading == pytest.approx(95.0)
    # A different contact is a first sighting again.
    other = store.ingest_contact_report(_report(366999002, cog_deg=10.0, heading_deg=20.0))
    assert other.heading == pytest.approx(10.0)


def test_contact_history_grows_per_report() -> None:
    store = TrackStore()
    for i in range(3):
        store.ingest_contact_report(_report(1, cog_deg=0.0, heading_deg=0.0, lat=43.07 + i * 0.001))

    history = store.contact_history(1)
    assert len(history) == 3
    assert [s.location.latitude for s in history] == pytest.approx([43.07, 43.071, 43.072])
    assert store.latest_contacts()[1] == history[-1]
    assert store.contact_history(999) == ()


def test_contact_local_undefined_until_origin() -> None:
    store = TrackStore()
    before = store.ingest_contact_report(_report(7, cog_deg=0.0, heading_deg=0.0))
    assert before.location_local is None

    store.set_origin(ORIGIN)

    rebuilt = store.contact_history(7)[0]
    assert rebuilt.location_local is not None
    expected = to_local(ORIGIN, rebuilt.location)
    assert rebuilt.location_local.east == pytest.approx(expected.east)
    assert rebuilt.location_local.north == pytest.approx(expected.north)


def test_append_contact_ignores_caller_local_without_origin() -> None:
    store = TrackStore()
    snapshot = ContactSnapshot(
        mmsi=5,
        location=_pt(43.07, -70.71),
        location_local=LocalOffset(east=1.0, north=2.0),
    )
    stored = store.append_contact(5, snapshot)
    assert stored.location_local is None


def test_reanchor_subtracts_reference_position() -> None:
    store = TrackStore()
    store.set_origin(ORIGIN)
    store.append_ownship(_pt(43.071, -70.709))

    # A display projector in "pixels": degrees scaled and shifted.
    def projector(point: GeodeticPoint) -> LocalOffset:
        return LocalOffset(east=point.longitude * 1000.0 + 500.0, north=point.latitude * 1000.0 - 200.0)

    store.reanchor(projector)

    assert store.reference_position == projector(ORIGIN)
    local = store.local_location_history[0]
    assert local.east == pytest.approx(1.0)
    assert local.north == pytest.approx(1.0)

    store.reanchor(None)
    assert store.reference_position == LocalOffset()
    assert store.local_location_history[0].north > 100.0


def test_reanchor_without_origin_is_noop() -> None:
    store = TrackStore()
    store.append_ownship(_pt(43.071, -70.709))
    store.reanchor(lambda p: LocalOffset(east=p.longitude, north=p.latitude))
    assert store.local_location_history == ()


def test_projector_without_origin_keeps_tracks_geodetic_only() -> None:
    store = TrackStore()
    store.reanchor(lambda p: LocalOffset(east=p.longitude, north=p.latitude))

    assert store.append_ownship(_pt(43.071, -70.709)) is None
    contact = store.ingest_contact_report(_report(7, cog_deg=10.0, heading_deg=20.0))
    direct = store.append_contact(8, ContactSnapshot(mmsi=8, location=_pt(43.0, -70.0)))

    assert not store.origin.valid
    assert len(store.location_history) == 1
    assert store.local_location_history == ()
    assert contact.location_local is None
    assert direct.location_local is None

    store.set_origin(ORIGIN)

    # The installed projector applies once the origin arrives.
    assert store.reference_position == LocalOffset(east=ORIGIN.longitude, north=ORIGIN.latitude)
    assert store.local_location_history[0].east == pytest.approx(0.001)
    assert store.contact_history(7)[0].location_local is not None


def test_history_limit_evicts_oldest_and_stays_aligned() -> None:
    store = TrackStore(history_limit=3)
    for i in range(5):
        store.append_ownship(_pt(43.07 + i * 0.001, -70.71))
    store.set_origin(ORIGIN)
    store.append_ownship(_pt(43.08, -70.71))

    assert [p.latitude for p in store.location_history] == pytest.approx([43.073, 43.074, 43.08])
    assert len(store.local_location_history) == 3

    for i in range(4):
        store.ingest_contact_report(_report(9, cog_deg=0.0, heading_deg=0.0, lat=43.07 + i * 0.001))
    assert len(store.contact_history(9)) == 3


def test_accessors_return_copies() -> None:
    store = TrackStore()
    store.ingest_contact_report(_report(1, cog_deg=0.0, heading_deg=0.0))

    contacts = store.contacts()
    contacts.pop(1)

    assert 1 in store.contacts()
