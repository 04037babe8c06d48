"""Tests de l'index des références."""

import pytest
from sqlalchemy import text

from s3reconcile.models import ReferenceDataError
from s3reconcile.references import (
    build_reference_set,
    connect,
    load_reference_set,
)


def _make_db(path, media_urls=(), pictures=()):
    """Base SQLite avec les tables medias et users."""
    engine = connect(f"sqlite:///{path}")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE medias (id INTEGER PRIMARY KEY, url TEXT)"))
        conn.execute(text("CREATE TABLE users (id INTEGER PRIMARY KEY, picture TEXT)"))
        for url in media_urls:
            conn.execute(text("INSERT INTO medias (url) VALUES (:u)"), {"u": url})
        for picture in pictures:
            conn.execute(
                text("INSERT INTO users (picture) VALUES (:p)"), {"p": picture},
            )
    return engine


class TestBuildReferenceSet:
    def test_extracts_base_identities(self):
        refs = build_reference_set(
            ["https://cdn/CarImages/car1.jpg?sig=1", "CarImages/car2.png"],
            ["https://cdn/users/avatar42.webp"],
        )
        assert refs == {"car1", "car2", "avatar42"}

    def test_skips_null_and_empty(self):
        refs = build_reference_set([None, "", "a/car1.jpg"], [None])
        assert refs == {"car1"}

    def test_duplicates_collapse(self):
        refs = build_reference_set(["a/car1.jpg", "b/car1.png"], ["car1.gif"])
        assert refs == {"car1"}

    def test_empty_inputs(self):
        assert build_reference_set([], []) == frozenset()

    def test_identity_empty_skipped(self):
        """Une URL terminée par '/' ne produit aucune identité."""
        assert build_reference_set(["https://cdn/folder/"], []) == frozenset()

    def test_immutable(self):
        assert isinstance(build_reference_set(["a.jpg"], []), frozenset)


class TestLoadReferenceSet:
    def test_reads_both_tables(self, tmp_path):
        engine = _make_db(
            tmp_path / "app.db",
            media_urls=["https://cdn/CarImages/car1.jpg", None, ""],
            pictures=["https://cdn/users/me.png", None],
        )
        assert load_reference_set(engine) == {"car1", "me"}

    def test_empty_tables(self, tmp_path):
        engine = _make_db(tmp_path / "app.db")
        assert load_reference_set(engine) == frozenset()

    def test_missing_table_is_terminal(self, tmp_path):
        engine = connect(f"sqlite:///{tmp_path / 'empty.db'}")
        with pytest.raises(ReferenceDataError):
            load_reference_set(engine)
