"""Tests for reference point resolution and the projection session."""

import json

import pytest

from survey_pipeline import (
    GeoCoordinate,
    MissingReference,
    NoReferenceAvailable,
    ProjectionMethod,
    ProjectionSession,
    ReferencePoint,
    read_zone_json,
    resolve_reference,
    validate_zone,
)

from conftest import conduit, manhole, segment


def _validated(doc):
    return validate_zone(read_zone_json(json.dumps(doc)))


class TestResolveReference:
    def test_first_point_feature_wins_over_conduit(self):
        doc = {
            "conduits": [conduit("L", segment(40.0, -70.0), segment(40.1, -70.1))],
            "manholes": [manhole("1", "41.7212", "-73.9325"), manhole("2", "42.0", "-74.0")],
        }
        ref = resolve_reference(ProjectionSession(), _validated(doc))
        assert (ref.latitude, ref.longitude) == (41.7212, -73.9325)

    def test_skips_invalid_point_features(self):
        doc = {"manholes": [manhole("1", "abc", "-73.9"), manhole("2", "42.0", "-74.0")]}
        ref = resolve_reference(ProjectionSession(), _validated(doc))
        assert (ref.latitude, ref.longitude) == (42.0, -74.0)

    def test_falls_back_to_first_conduit_segment(self):
        doc = {
            "conduits": [
                conduit("L1", segment("bad", 0), segment(40.0, -70.0), segment(40.1, -70.1)),
                conduit("L2", segment(39.0, -69.0), segment(39.1, -69.1)),
            ],
            "manholes": [manhole("1", "abc", "-73.9")],
        }
        ref = resolve_reference(ProjectionSession(), _validated(doc))
        assert (ref.latitude, ref.longitude) == (40.0, -70.0)

    def test_conduit_without_valid_segments_is_passed_over(self):
        doc = {
            "conduits": [
                conduit("Empty"),
                conduit("L2", segment(39.0, -69.0)),
            ]
        }
        ref = resolve_reference(ProjectionSession(), _validated(doc))
        assert (ref.latitude, ref.longitude) == (39.0, -69.0)

    def test_explicit_reference_beats_input(self):
        doc = {"manholes": [manhole("1", "41.7212", "-73.9325")]}
        explicit = GeoCoordinate(latitude=10.0, longitude=20.0, altitude=3.0)
        ref = resolve_reference(ProjectionSession(), _validated(doc), explicit)
        assert ref == ReferencePoint(latitude=10.0, longitude=20.0, altitude=3.0)

    def test_invalid_explicit_reference(self):
        with pytest.raises(NoReferenceAvailable):
            resolve_reference(ProjectionSession(), _validated({}), GeoCoordinate(latitude=100.0, longitude=0.0))

    def test_session_reference_is_kept(self):
        session = ProjectionSession(reference=ReferencePoint(latitude=1.0, longitude=2.0))
        doc = {"manholes": [manhole("1", "41.7212", "-73.9325")]}
        ref = resolve_reference(session, _validated(doc), GeoCoordinate(latitude=5.0, longitude=5.0))
        assert (ref.latitude, ref.longitude) == (1.0, 2.0)

    def test_zero_reference_is_a_real_reference(self):
        session = ProjectionSession(reference=ReferencePoint(latitude=0.0, longitude=0.0))
        doc = {"manholes": [manhole("1", "41.7212", "-73.9325")]}
        ref = resolve_reference(session, _validated(doc))
        assert (ref.latitude, ref.longitude) == (0.0, 0.0)

    def test_nothing_available(self):
        doc = {"manholes": [manhole("1", "abc", "x")], "conduits": [conduit("L")]}
        with pytest.raises(NoReferenceAvailable) as excinfo:
            resolve_reference(ProjectionSession(), _validated(doc))
        assert excinfo.value.fatal


class TestProjectionSession:
    def test_unset_by_default(self):
        session = ProjectionSession()
        assert session.reference is None
        assert session.method is ProjectionMethod.EQUIRECTANGULAR

    def test_project_without_reference(self):
        with pytest.raises(MissingReference):
            ProjectionSession().project(GeoCoordinate(latitude=1.0, longitude=1.0))

    def test_set_reference_is_noop_when_set(self):
        session = ProjectionSession()
        first = session.set_reference(GeoCoordinate(latitude=1.0, longitude=1.0))
        second = session.set_reference(GeoCoordinate(latitude=2.0, longitude=2.0))
        assert second is first
        assert session.reference.latitude == 1.0

    def test_projection_freezes_and_reset_replaces(self):
        session = ProjectionSession("utm_grid")
        session.set_reference(GeoCoordinate(latitude=1.0, longitude=1.0))
        assert not session.frozen
        session.project(GeoCoordinate(latitude=1.001, longitude=1.0))
        assert session.frozen

        session.set_reference(GeoCoordinate(latitude=2.0, longitude=2.0))
        assert session.reference.latitude == 1.0

        session.set_reference(GeoCoordinate(latitude=2.0, longitude=2.0), reset=True)
        assert session.reference.latitude == 2.0
        assert not session.frozen

    def test_reset_clears(self):
        session = ProjectionSession(reference=ReferencePoint(latitude=1.0, longitude=1.0))
        session.reset()
        assert session.reference is None

    def test_sessions_are_independent(self):
        a = ProjectionSession(reference=ReferencePoint(latitude=1.0, longitude=1.0))
        b = ProjectionSession(reference=ReferencePoint(latitude=2.0, longitude=2.0))
        point = GeoCoordinate(latitude=1.5, longitude=1.5)
        assert a.project(point).north == pytest.approx(-b.project(point).north)
