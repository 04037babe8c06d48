"""Tests de la politique d'inclusion."""

import pytest

from s3reconcile.models import Ruleset, StoredObject
from s3reconcile.policy import (
    DOCUMENT_SNAPSHOT,
    DOCUMENT_THUMBNAIL,
    FOLDER_MARKER,
    THUMBNAIL_SCOPE,
    UNREFERENCED,
    evaluate,
    should_include,
)

REFS = frozenset({"car1", "scan1"})


def _obj(key, size=100):
    return StoredObject(key=key, size=size)


class TestFolderMarker:
    @pytest.mark.parametrize("refs", [REFS, frozenset({""}), None])
    def test_always_excluded(self, refs):
        decision = evaluate(_obj("CarImages/", size=0), "other", "original", refs)
        assert decision.included is False
        assert decision.reason == FOLDER_MARKER

    def test_non_empty_trailing_slash_not_marker(self):
        decision = evaluate(_obj("CarImages/", size=5), "other", "original", None)
        assert decision.reason != FOLDER_MARKER

    def test_empty_file_not_marker(self):
        decision = evaluate(_obj("CarImages/car1.jpg", size=0),
                            "images", "original", REFS)
        assert decision.included is True


class TestReferenceMatch:
    def test_referenced_original(self):
        assert should_include(_obj("CarImages/car1.jpg"),
                              "images", "original", REFS)

    def test_unreferenced(self):
        decision = evaluate(_obj("car2.jpg"), "images", "original", REFS)
        assert decision.included is False
        assert decision.reason == UNREFERENCED

    @pytest.mark.parametrize("key,role", [
        ("CarImages/reduced/car1.jpg", "reduced"),
        ("CarImages/snapshot_x/car1.png", "snapshot"),
        ("CarImages/thumbnail/car1.jpg", "thumbnail"),
    ])
    def test_derived_included_with_original_identity(self, key, role):
        assert should_include(_obj(key), "images", role, REFS)

    def test_no_reference_set_disables_stage(self):
        assert should_include(_obj("car2.jpg"), "images", "original", None)

    def test_decision_carries_identity(self):
        decision = evaluate(_obj("CarImages/Car1.JPG"), "images", "original", REFS)
        assert decision.base_identity == "Car1"
        assert decision.extension == "jpg"


class TestThumbnailScope:
    def test_outside_prefix_excluded(self):
        decision = evaluate(_obj("Other/thumbnail/car1.jpg"),
                            "images", "thumbnail", REFS)
        assert decision.included is False
        assert decision.reason == THUMBNAIL_SCOPE

    def test_inside_prefix_included(self):
        assert should_include(_obj("CarImages/thumbnail/car1.jpg"),
                              "images", "thumbnail", REFS)

    def test_reference_checked_first(self):
        decision = evaluate(_obj("Other/thumbnail/car9.jpg"),
                            "images", "thumbnail", REFS)
        assert decision.reason == UNREFERENCED

    def test_custom_prefix(self):
        ruleset = Ruleset(thumbnail_prefix="Other/")
        assert should_include(_obj("Other/thumbnail/car1.jpg"),
                              "images", "thumbnail", REFS, ruleset=ruleset)


class TestDocumentExclusions:
    def test_document_thumbnail_excluded(self):
        decision = evaluate(_obj("CarImages/Documents/thumbnail/scan1.jpg"),
                            "documents", "thumbnail", REFS)
        assert decision.included is False
        assert decision.reason == DOCUMENT_THUMBNAIL

    def test_document_snapshot_kept_by_default(self):
        obj = _obj("Documents/x/snapshot_scan1.png")
        assert should_include(obj, "documents", "snapshot", frozenset({"snapshot_scan1"}))

    def test_document_snapshot_excluded_with_flag(self):
        obj = _obj("Documents/x/snapshot_scan1.png")
        decision = evaluate(obj, "documents", "snapshot",
                            frozenset({"snapshot_scan1"}),
                            exclude_document_snapshots=True)
        assert decision.included is False
        assert decision.reason == DOCUMENT_SNAPSHOT

    def test_image_snapshot_ignores_flag(self):
        obj = _obj("CarImages/x/snapshot_car1.png")
        assert should_include(obj, "images", "snapshot",
                              frozenset({"snapshot_car1"}),
                              exclude_document_snapshots=True)
