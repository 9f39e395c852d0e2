"""
Storage adapter interface for signature zones.
Defines the contract that all storage backends must implement.
"""

from typing import Protocol, List, Dict, Any, Optional


class StorageAdapter(Protocol):
    """
    Protocol defining the interface for all storage adapters.

    This allows swapping between the JSON files and SQLite
    without changing the router or business logic code.

    NOTE:
    - Rows are plain dicts; routers turn them into domain models.
    - Missing rows are reported as ValueError("SIGN_DOCUMENT_NOT_FOUND") /
      ValueError("ZONE_NOT_FOUND"), a duplicate zone id as
      ValueError("ZONE_ALREADY_EXISTS").
    """

    backend_name: str

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
        """
        Create or fully replace a sign document and its zone list.

        Args:
            doc_id: Document ID (chosen by the caller)
            file_path: URL of the PDF
            zones: Zone storage rows (see Zone.to_storage) in creation order
            original_filename: Optional uploaded file name
            file_size: Optional size in bytes
            uploaded_by: Optional uploader email/ID

        Returns:
            The stored document row. `created_at` survives a re-save.
        """
        ...

    def get_sign_document(self, doc_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a document row by its doc_id.

        Returns:
            Dict with document fields, or None if not found.
        """
        ...

    # ========== Zones ==========

    def list_zones(self, doc_id: str) -> List[Dict[str, Any]]:
        """List zone rows of a document, ordered by order_index."""
        ...

    def create_zone(self, doc_id: str, zone: Dict[str, Any]) -> Dict[str, Any]:
        """
        Append one zone after the existing ones.

        Returns:
            The stored zone row (with its order_index).
        """
        ...

    def update_zone(self, doc_id: str, zone_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update mutable zone fields (only `label`). Returns the updated row.
        """
        ...

    def delete_zone(self, doc_id: str, zone_id: str) -> None:
        """
        Delete a zone and any stored signatures for it.
        """
        ...

    # ========== Signatures ==========

    def replace_signatures(
        self,
        doc_id: str,
        session_id: str,
        signatures: List[Dict[str, Any]],
    ) -> int:
        """
        Atomically replace the signatures of one signing session.

        Args:
            signatures: rows with zone_id, signature_data, signed_at

        Returns:
            Number of rows written.
        """
        ...

    def list_signatures(self, doc_id: str, session_id: str) -> List[Dict[str, Any]]:
        """
        Signatures of one signing session, in zone order.
        """
        ...

    def ping(self) -> None:
        """Cheap connectivity check for readiness probes; raises on failure."""
        ...
