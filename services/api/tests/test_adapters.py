"""
Contract tests run against both storage backends.

Run with: pytest tests/test_adapters.py -v
"""
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models import Zone
from adapters.json import JsonAdapter
from adapters.sqlite import SqliteAdapter

PNG_URI = "data:image/png;base64,Qg=="


def _rows(doc_id, *zones):
    return [z.to_storage(doc_id, i) for i, z in enumerate(zones)]


def _zone(zid, page=1, label=""):
    return Zone(id=zid, page=page, x=10, y=10, width=20, height=10, label=label)


@pytest.fixture(params=["json", "sqlite"])
def storage(request, tmp_path):
    if request.param == "json":
        return JsonAdapter(data_dir=str(tmp_path / "data"))
    return SqliteAdapter.from_url(f"sqlite:///{tmp_path / 'db' / 'test.db'}")


class TestSignDocuments:

    def test_save_and_get(self, storage):
        doc = storage.save_sign_document(
            "d1", "https://x/a.pdf", _rows("d1", _zone("a"), _zone("b", page=2)),
            original_filename="a.pdf", file_size=123, uploaded_by="me@x",
        )
        assert doc["doc_id"] == "d1"
        assert doc["file_size"] == 123

        fetched = storage.get_sign_document("d1")
        assert fetched["file_path"] == "https://x/a.pdf"
        assert fetched["original_filename"] == "a.pdf"
        assert [z["zone_id"] for z in storage.list_zones("d1")] == ["a", "b"]

    def test_missing_document(self, storage):
        assert storage.get_sign_document("nope") is None
        assert storage.list_zones("nope") == []

    def test_resave_replaces_zones_and_keeps_created_at(self, storage):
        first = storage.save_sign_document("d1", "https://x/a.pdf", _rows("d1", _zone("a"), _zone("b")))
        second = storage.save_sign_document("d1", "https://x/b.pdf", _rows("d1", _zone("c")))
        assert second["created_at"] == first["created_at"]
        assert second["file_path"] == "https://x/b.pdf"
        assert [z["zone_id"] for z in storage.list_zones("d1")] == ["c"]

    def test_documents_are_isolated(self, storage):
        storage.save_sign_document("d1", "https://x/a.pdf", _rows("d1", _zone("a")))
        storage.save_sign_document("d2", "https://x/b.pdf", _rows("d2", _zone("a")))
        storage.delete_zone("d1", "a")
        assert storage.list_zones("d1") == []
        assert [z["zone_id"] for z in storage.list_zones("d2")] == ["a"]


class TestZones:

    def test_create_appends(self, storage):
        storage.save_sign_document("d1", "https://x/a.pdf", _rows("d1", _zone("a")))
        row = storage.create_zone("d1", _zone("b", page=3).to_storage("d1", 0))
        assert row["order_index"] == 1
        zones = [Zone.from_storage(r) for r in storage.list_zones("d1")]
        assert [(z.id, z.page) for z in zones] == [("a", 1), ("b", 3)]

    def test_create_on_missing_document(self, storage):
        with pytest.raises(ValueError, match="SIGN_DOCUMENT_NOT_FOUND"):
            storage.create_zone("nope", _zone("a").to_storage("nope", 0))

    def test_create_duplicate(self, storage):
        storage.save_sign_document("d1", "https://x/a.pdf", _rows("d1", _zone("a")))
        with pytest.raises(ValueError, match="ZONE_ALREADY_EXISTS"):
            storage.create_zone("d1", _zone("a").to_storage("d1", 1))

    def test_update_label_only(self, storage):
        storage.save_sign_document("d1", "https://x/a.pdf", _rows("d1", _zone("a", label="old")))
        row = storage.update_zone("d1", "a", {"label": "new", "x": 90})
        assert row["label"] == "new"
        assert row["x"] == 10

    def test_update_missing(self, storage):
        storage.save_sign_document("d1", "https://x/a.pdf", _rows("d1", _zone("a")))
        with pytest.raises(ValueError, match="ZONE_NOT_FOUND"):
            storage.update_zone("d1", "zz", {"label": "x"})

    def test_delete(self, storage):
        storage.save_sign_document("d1", "https://x/a.pdf", _rows("d1", _zone("a"), _zone("b")))
        storage.replace_signatures("d1", "s1", [
            {"zone_id": "a", "signature_data": PNG_URI},
            {"zone_id": "b", "signature_data": PNG_URI},
        ])
        storage.delete_zone("d1", "a")
        assert [z["zone_id"] for z in storage.list_zones("d1")] == ["b"]
        assert [s["zone_id"] for s in storage.list_signatures("d1", "s1")] == ["b"]

        with pytest.raises(ValueError, match="ZONE_NOT_FOUND"):
            storage.delete_zone("d1", "a")


class TestSignatures:

    def test_replace_per_session(self, storage):
        storage.save_sign_document("d1", "https://x/a.pdf", _rows("d1", _zone("a"), _zone("b")))
        assert storage.replace_signatures("d1", "s1", [
            {"zone_id": "b", "signature_data": PNG_URI, "signed_at": "2024-01-01T00:00:00Z"},
            {"zone_id": "a", "signature_data": PNG_URI},
        ]) == 2
        storage.replace_signatures("d1", "s2", [{"zone_id": "a", "signature_data": PNG_URI}])

        rows = storage.list_signatures("d1", "s1")
        assert [r["zone_id"] for r in rows] == ["a", "b"]
        assert rows[1]["signed_at"] == "2024-01-01T00:00:00Z"
        assert rows[0]["signed_at"]

        storage.replace_signatures("d1", "s1", [{"zone_id": "b", "signature_data": PNG_URI}])
        assert [r["zone_id"] for r in storage.list_signatures("d1", "s1")] == ["b"]
        assert [r["zone_id"] for r in storage.list_signatures("d1", "s2")] == ["a"]

    def test_resave_drops_signatures_of_removed_zones(self, storage):
        storage.save_sign_document("d1", "https://x/a.pdf", _rows("d1", _zone("a"), _zone("b")))
        storage.save_sign_document("d2", "https://x/b.pdf", _rows("d2", _zone("b")))
        sigs = [
            {"zone_id": "a", "signature_data": PNG_URI},
            {"zone_id": "b", "signature_data": PNG_URI},
        ]
        storage.replace_signatures("d1", "s1", sigs)
        storage.replace_signatures("d2", "s1", sigs[1:])

        storage.save_sign_document("d1", "https://x/a.pdf", _rows("d1", _zone("c"), _zone("a")))
        assert [r["zone_id"] for r in storage.list_signatures("d1", "s1")] == ["a"]
        assert [r["zone_id"] for r in storage.list_signatures("d2", "s1")] == ["b"]

    def test_missing_document(self, storage):
        with pytest.raises(ValueError, match="SIGN_DOCUMENT_NOT_FOUND"):
            storage.replace_signatures("nope", "s1", [])

    def test_ping(self, storage):
        storage.ping()
