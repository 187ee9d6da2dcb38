"""Tests for collection initialization and sample data."""

from barsocial.db import init_collections
from barsocial.db.init_collections import (
    SAMPLE_DATA_TEMPLATES,
    init_mongodb,
    validate_document,
    validate_sample_data,
)


def test_sample_data_matches_schemas():
    assert validate_sample_data() is True


def test_sample_relationships_are_symmetric():
    users = {u["id"]: u for u in SAMPLE_DATA_TEMPLATES["users"]}
    bars = {b["id"]: b for b in SAMPLE_DATA_TEMPLATES["bars"]}

    for user in users.values():
        for followed in user["following"]:
            assert user["id"] in users[followed]["followers"]
        for bar_id in user["followingBars"]:
            assert user["id"] in bars[bar_id]["followers"]


def test_invalid_document_is_rejected():
    bar = dict(SAMPLE_DATA_TEMPLATES["bars"][0], location={"type": "Point", "coordinates": [500, 0]})
    assert validate_document("bars", bar) is False


def test_init_inserts_samples_once(db):
    assert init_mongodb(insert_samples=True) is True
    assert init_mongodb(insert_samples=True) is True

    assert db.users.count_documents({}) == len(SAMPLE_DATA_TEMPLATES["users"])
    assert db.bars.count_documents({}) == len(SAMPLE_DATA_TEMPLATES["bars"])
    # the templates themselves are left untouched
    assert "_id" not in SAMPLE_DATA_TEMPLATES["users"][0]


def test_init_aborts_on_invalid_samples(db, monkeypatch):
    broken = {"users": [{"id": "not-hex"}], "bars": []}
    monkeypatch.setattr(init_collections, "SAMPLE_DATA_TEMPLATES", broken)

    assert init_mongodb(insert_samples=True) is False
    assert db.users.count_documents({}) == 0
