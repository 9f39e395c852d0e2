"""
JSON file storage adapter for signature zones.
Simple file-based storage for quick demos and testing.
Not production-ready (no proper locking, not suitable for concurrent access).
"""
import json
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional
from pathlib import Path


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class JsonAdapter:
    """
    JSON file-based storage adapter.
    Stores data in separate JSON files under the data directory.
    Uses atomic file operations for basic consistency.
    """

    backend_name = "json"

    def __init__(self, data_dir: str = "data"):
        """
        Initialize the JSON adapter.

        Args:
            data_dir: Directory to store JSON files
        """
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        # File paths
        self.documents_file = self.data_dir / "sign_documents.json"
        self.zones_file = self.data_dir / "zones.json"
        self.signatures_file = self.data_dir / "signatures.json"

        # Initialize files if they don't exist
        for file in [self.documents_file, self.zones_file, self.signatures_file]:
            if not file.exists():
                self._write_file(file, [])

    def _read_file(self, filepath: Path) -> List[Dict[str, Any]]:
        """Read and parse a JSON file."""
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return json.load(f)
        except (FileNotFoundError, json.JSONDecodeError):
            return []

    def _write_file(self, filepath: Path, data: List[Dict[str, Any]]) -> None:
        """Write data to a JSON file atomically."""
        # Write to temporary file first
        tmp_file = filepath.with_suffix(".tmp")
        with open(tmp_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, default=str)

        # Atomic rename
        tmp_file.replace(filepath)

    def _require_document(self, doc_id: str) -> Dict[str, Any]:
        doc = self.get_sign_document(doc_id)
        if not doc:
            raise ValueError("SIGN_DOCUMENT_NOT_FOUND")
        return doc

    def _touch_document(self, doc_id: str) -> None:
        documents = self._read_file(self.documents_file)
        for d in documents:
            if d["doc_id"] == doc_id:
                d["updated_at"] = _now()
        self._write_file(self.documents_file, documents)

    # ========== Sign documents ==========

    def save_sign_document(
        self,
        doc_id: str,
        file_path: str,
        zones: List[Dict[str, Any]],
        original_filename: Optional[str] = None,
        file_size: Optional[int] = None,
        uploaded_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create or replace a document together with its full zone list."""
        now = _now()
        documents = self._read_file(self.documents_file)
        doc = next((d for d in documents if d["doc_id"] == doc_id), None)
        if doc is None:
            doc = {"doc_id": doc_id, "created_at": now}
            documents.append(doc)

        doc.update({
            "file_path": file_path,
            "original_filename": original_filename or "",
            "file_size": file_size,
            "uploaded_by": uploaded_by,
            "updated_at": now,
        })

        # Replace zones of this document, keep the given order
        all_zones = [z for z in self._read_file(self.zones_file) if z["doc_id"] != doc_id]
        for i, z in enumerate(zones):
            row = dict(z)
            row["doc_id"] = doc_id
            row["order_index"] = i
            all_zones.append(row)

        self._write_file(self.zones_file, all_zones)
        # Signatures of zones that were dropped go with them
        kept_ids = {z["zone_id"] for z in zones}
        signatures = [
            s for s in self._read_file(self.signatures_file)
            if s["doc_id"] != doc_id or s["zone_id"] in kept_ids
        ]
        self._write_file(self.signatures_file, signatures)
        self._write_file(self.documents_file, documents)
        return dict(doc)

    def get_sign_document(self, doc_id: str) -> Optional[Dict[str, Any]]:
        documents = self._read_file(self.documents_file)
        doc = next((d for d in documents if d["doc_id"] == doc_id), None)
        return dict(doc) if doc else None

    # ========== Zones ==========

    def list_zones(self, doc_id: str) -> List[Dict[str, Any]]:
        """List all zones of a document, ordered by order_index."""
        zones = [z for z in self._read_file(self.zones_file) if z["doc_id"] == doc_id]
        zones.sort(key=lambda z: z["order_index"])
        return zones

    def create_zone(self, doc_id: str, zone: Dict[str, Any]) -> Dict[str, Any]:
        self._require_document(doc_id)

        all_zones = self._read_file(self.zones_file)
        doc_zones = [z for z in all_zones if z["doc_id"] == doc_id]
        if any(z["zone_id"] == zone["zone_id"] for z in doc_zones):
            raise ValueError("ZONE_ALREADY_EXISTS")

        row = dict(zone)
        row["doc_id"] = doc_id
        row["order_index"] = max((z["order_index"] for z in doc_zones), default=-1) + 1
        all_zones.append(row)

        self._write_file(self.zones_file, all_zones)
        self._touch_document(doc_id)
        return row

    def update_zone(self, doc_id: str, zone_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        all_zones = self._read_file(self.zones_file)
        zone = next((z for z in all_zones if z["doc_id"] == doc_id and z["zone_id"] == zone_id), None)
        if not zone:
            raise ValueError("ZONE_NOT_FOUND")

        # Geometry is fixed once drawn
        if "label" in updates:
            zone["label"] = updates["label"] or ""

        self._write_file(self.zones_file, all_zones)
        self._touch_document(doc_id)
        return zone

    def delete_zone(self, doc_id: str, zone_id: str) -> None:
        all_zones = self._read_file(self.zones_file)
        kept = [z for z in all_zones if not (z["doc_id"] == doc_id and z["zone_id"] == zone_id)]
        if len(kept) == len(all_zones):
            raise ValueError("ZONE_NOT_FOUND")

        signatures = [
            s for s in self._read_file(self.signatures_file)
            if not (s["doc_id"] == doc_id and s["zone_id"] == zone_id)
        ]
        self._write_file(self.zones_file, kept)
        self._write_file(self.signatures_file, signatures)
        self._touch_document(doc_id)

    # ========== Signatures ==========

    def replace_signatures(
        self,
        doc_id: str,
        session_id: str,
        signatures: List[Dict[str, Any]],
    ) -> int:
        self._require_document(doc_id)

        rows = [
            s for s in self._read_file(self.signatures_file)
            if not (s["doc_id"] == doc_id and s["session_id"] == session_id)
        ]
        now = _now()
        for sig in signatures:
            rows.append({
                "doc_id": doc_id,
                "session_id": session_id,
                "zone_id": sig["zone_id"],
                "signature_data": sig["signature_data"],
                "signed_at": sig.get("signed_at") or now,
            })

        self._write_file(self.signatures_file, rows)
        return len(signatures)

    def list_signatures(self, doc_id: str, session_id: str) -> List[Dict[str, Any]]:
        order = {z["zone_id"]: z["order_index"] for z in self.list_zones(doc_id)}
        rows = [
            s for s in self._read_file(self.signatures_file)
            if s["doc_id"] == doc_id and s["session_id"] == session_id and s["zone_id"] in order
        ]
        rows.sort(key=lambda s: order[s["zone_id"]])
        return rows

    def ping(self) -> None:
        if not self.data_dir.is_dir():
            raise RuntimeError(f"Data directory missing: {self.data_dir}")
