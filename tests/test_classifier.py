"""Tests du classifieur — catégorie de média et rôle de chemin."""

import pytest

from s3reconcile.classifier import classify, classify_path_role
from s3reconcile.models import Ruleset


class TestClassify:
    @pytest.mark.parametrize("ext", ["jpg", "jpeg", "png", "webp", "tif"])
    def test_images(self, ext):
        assert classify(f"CarImages/a.{ext}", ext) == "images"

    @pytest.mark.parametrize("ext", ["mp4", "mov", "mkv", "m4v"])
    def test_videos(self, ext):
        assert classify(f"Videos/a.{ext}", ext) == "videos"

    def test_document_by_extension(self):
        assert classify("Contracts/a.pdf", "pdf") == "documents"

    def test_other(self):
        assert classify("misc/a.zip", "zip") == "other"
        assert classify("misc/README", "") == "other"

    def test_documents_folder_wins_over_extension(self):
        """Un scan enregistré en .jpg reste un document."""
        assert classify("Documents/scan.jpg", "jpg") == "documents"

    def test_nested_documents_folder(self):
        assert classify("users/42/Documents/id.png", "png") == "documents"

    def test_documents_substring_is_not_folder(self):
        assert classify("MyDocuments/scan.jpg", "jpg") == "images"

    def test_custom_ruleset(self):
        ruleset = Ruleset(image_extensions=frozenset({"heic"}))
        assert classify("a/b.heic", "heic", ruleset) == "images"
        assert classify("a/b.jpg", "jpg", ruleset) == "other"


class TestClassifyPathRole:
    def test_thumbnail(self):
        assert classify_path_role("a/thumbnail/b.jpg") == "thumbnail"

    def test_reduced(self):
        assert classify_path_role("a/reduced/b.jpg") == "reduced"

    def test_snapshot(self):
        assert classify_path_role("a/snapshot_1.png") == "snapshot"

    def test_original(self):
        assert classify_path_role("a/b.jpg") == "original"

    def test_root_level_snapshot_is_original(self):
        """Le marqueur exige un '/' devant 'snapshot_'."""
        assert classify_path_role("snapshot_1.png") == "original"

    def test_first_marker_wins(self):
        assert classify_path_role("a/thumbnail/reduced/b.jpg") == "thumbnail"
        assert classify_path_role("a/reduced/snapshot_1.png") == "reduced"
