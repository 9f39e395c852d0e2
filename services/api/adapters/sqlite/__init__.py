# services/api/adapters/sqlite/__init__.py
from __future__ import annotations

import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    ForeignKeyConstraint,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
    delete,
    func,
    insert,
    select,
    text,
    update,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

# ---- Engine (SQLite) with WAL & pragmas -------------------------------------

def _ensure_dir(path: str):
    d = os.path.dirname(path)
    if d and not os.path.isdir(d):
        os.makedirs(d, exist_ok=True)

def make_engine(db_url: str) -> Engine:
    # Create data dir if sqlite file
    if db_url.startswith("sqlite:///"):
        file_path = db_url.replace("sqlite:///", "", 1)
        _ensure_dir(file_path)

    engine = create_engine(db_url, future=True, pool_pre_ping=True)

    # Apply pragmas per-connection
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # type: ignore
        if isinstance(dbapi_connection, sqlite3.Connection):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA synchronous=NORMAL;")
            cursor.execute("PRAGMA temp_store=MEMORY;")
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.close()

    return engine

def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

# ---- Schema via SQLAlchemy Core ---------------------------------------------

metadata = MetaData()

sign_documents = Table(
    "sign_documents",
    metadata,
    Column("doc_id", String, primary_key=True),
    Column("file_path", Text, nullable=False),
    Column("original_filename", String, nullable=False, default=""),
    Column("file_size", Integer, nullable=True),
    Column("uploaded_by", String),
    Column("created_at", String, nullable=False),
    Column("updated_at", String, nullable=False),
    CheckConstraint("file_size IS NULL OR file_size >= 0", name="ck_file_size"),
)

zones = Table(
    "zones",
    metadata,
    Column("doc_id", String, ForeignKey("sign_documents.doc_id", ondelete="CASCADE"), nullable=False),
    Column("zone_id", String, nullable=False),
    Column("order_index", Integer, nullable=False),
    Column("page", Integer, nullable=False, default=1),  # 1-based
    Column("x", Float, nullable=False),
    Column("y", Float, nullable=False),
    Column("width", Float, nullable=False),
    Column("height", Float, nullable=False),
    Column("label", String, nullable=False, default=""),
    PrimaryKeyConstraint("doc_id", "zone_id", name="pk_zones"),
    UniqueConstraint("doc_id", "order_index", name="uq_zones_doc_order"),
    CheckConstraint("page >= 1", name="ck_page"),
    CheckConstraint("x >= 0 AND x <= 100", name="ck_x"),
    CheckConstraint("y >= 0 AND y <= 100", name="ck_y"),
    CheckConstraint("width >= 0 AND width <= 100", name="ck_width"),
    CheckConstraint("height >= 0 AND height <= 100", name="ck_height"),
)

signatures = Table(
    "signatures",
    metadata,
    Column("doc_id", String, nullable=False),
    Column("session_id", String, nullable=False),
    Column("zone_id", String, nullable=False),
    Column("signature_data", Text, nullable=False),
    Column("signed_at", String, nullable=False),
    PrimaryKeyConstraint("doc_id", "session_id", "zone_id", name="pk_signatures"),
    ForeignKeyConstraint(["doc_id"], ["sign_documents.doc_id"], ondelete="CASCADE"),
)

Index("idx_zones_doc_order", zones.c.doc_id, zones.c.order_index)
Index("idx_signatures_session", signatures.c.doc_id, signatures.c.session_id)

_ZONE_COLUMNS = (
    zones.c.zone_id,
    zones.c.doc_id,
    zones.c.order_index,
    zones.c.page,
    zones.c.x,
    zones.c.y,
    zones.c.width,
    zones.c.height,
    zones.c.label,
)

def _zone_values(doc_id: str, order_index: int, z: Dict[str, Any]) -> Dict[str, Any]:
    return dict(
        doc_id=doc_id,
        zone_id=str(z["zone_id"]),
        order_index=order_index,
        page=int(z.get("page", 1)),
        x=float(z["x"]),
        y=float(z["y"]),
        width=float(z["width"]),
        height=float(z["height"]),
        label=str(z.get("label") or ""),
    )

# ---- Adapter implementation --------------------------------------------------

@dataclass(frozen=True)
class SqliteAdapter:
    engine: Engine
    backend_name: str = "sqlite"

    @classmethod
    def from_url(cls, db_url: str = "sqlite:///data/signzones.db") -> "SqliteAdapter":
        eng = make_engine(db_url)
        metadata.create_all(eng)
        return cls(engine=eng)

    # Sign documents (document row + full zone list, atomic)
    def save_sign_document(
        self,
        doc_id: str,
        file_path: str,
        zones_in: List[Dict[str, Any]],
        original_filename: Optional[str] = None,
        file_size: Optional[int] = None,
        uploaded_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        now = _now()
        values = dict(
            file_path=file_path,
            original_filename=original_filename or "",
            file_size=file_size,
            uploaded_by=uploaded_by or None,
            updated_at=now,
        )
        with self.engine.begin() as conn:
            exists = conn.execute(
                select(sign_documents.c.doc_id).where(sign_documents.c.doc_id == doc_id)
            ).first()
            if exists:
                conn.execute(
                    update(sign_documents).where(sign_documents.c.doc_id == doc_id).values(**values)
                )
            else:
                conn.execute(insert(sign_documents).values(doc_id=doc_id, created_at=now, **values))

            conn.execute(delete(zones).where(zones.c.doc_id == doc_id))
            rows = [_zone_values(doc_id, i, z) for i, z in enumerate(zones_in)]
            conn.execute(
                delete(signatures).where(
                    signatures.c.doc_id == doc_id,
                    signatures.c.zone_id.not_in([r["zone_id"] for r in rows]),
                )
            )
            if rows:
                try:
                    conn.execute(zones.insert(), rows)
                except IntegrityError as e:
                    raise ValueError("Zone rows violate storage constraints") from e

        return self.get_sign_document(doc_id)  # type: ignore[return-value]

    def get_sign_document(self, doc_id: str) -> Optional[Dict[str, Any]]:
        with self.engine.begin() as conn:
            row = conn.execute(
                select(sign_documents).where(sign_documents.c.doc_id == doc_id)
            ).mappings().first()
            return dict(row) if row else None

    # Zones
    def list_zones(self, doc_id: str) -> List[Dict[str, Any]]:
        with self.engine.begin() as conn:
            q = (
                select(*_ZONE_COLUMNS)
                .where(zones.c.doc_id == doc_id)
                .order_by(zones.c.order_index.asc())
            )
            rows = conn.execute(q).mappings().all()
            return [dict(row) for row in rows]

    def create_zone(self, doc_id: str, zone: Dict[str, Any]) -> Dict[str, Any]:
        with self.engine.begin() as conn:
            if not conn.execute(
                select(sign_documents.c.doc_id).where(sign_documents.c.doc_id == doc_id)
            ).first():
                raise ValueError("SIGN_DOCUMENT_NOT_FOUND")

            dup = conn.execute(
                select(zones.c.zone_id).where(
                    zones.c.doc_id == doc_id, zones.c.zone_id == str(zone["zone_id"])
                )
            ).first()
            if dup:
                raise ValueError("ZONE_ALREADY_EXISTS")

            last = conn.execute(
                select(func.max(zones.c.order_index)).where(zones.c.doc_id == doc_id)
            ).scalar()
            row = _zone_values(doc_id, 0 if last is None else last + 1, zone)
            conn.execute(insert(zones).values(**row))
            conn.execute(
                update(sign_documents)
                .where(sign_documents.c.doc_id == doc_id)
                .values(updated_at=_now())
            )
        return row

    def update_zone(self, doc_id: str, zone_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        allowed = {k: (v or "") for k, v in updates.items() if k == "label"}
        with self.engine.begin() as conn:
            where = (zones.c.doc_id == doc_id) & (zones.c.zone_id == zone_id)
            if allowed:
                conn.execute(update(zones).where(where).values(**allowed))
            row = conn.execute(select(*_ZONE_COLUMNS).where(where)).mappings().first()
            if not row:
                raise ValueError("ZONE_NOT_FOUND")
            conn.execute(
                update(sign_documents)
                .where(sign_documents.c.doc_id == doc_id)
                .values(updated_at=_now())
            )
            return dict(row)

    def delete_zone(self, doc_id: str, zone_id: str) -> None:
        with self.engine.begin() as conn:
            res = conn.execute(
                delete(zones).where(zones.c.doc_id == doc_id, zones.c.zone_id == zone_id)
            )
            if res.rowcount == 0:
                raise ValueError("ZONE_NOT_FOUND")
            conn.execute(
                delete(signatures).where(
                    signatures.c.doc_id == doc_id, signatures.c.zone_id == zone_id
                )
            )
            conn.execute(
                update(sign_documents)
                .where(sign_documents.c.doc_id == doc_id)
                .values(updated_at=_now())
            )

    # Signatures (replace per session, atomic)
    def replace_signatures(
        self,
        doc_id: str,
        session_id: str,
        signatures_in: List[Dict[str, Any]],
    ) -> int:
        now = _now()
        with self.engine.begin() as conn:
            if not conn.execute(
                select(sign_documents.c.doc_id).where(sign_documents.c.doc_id == doc_id)
            ).first():
                raise ValueError("SIGN_DOCUMENT_NOT_FOUND")

            conn.execute(
                delete(signatures).where(
                    signatures.c.doc_id == doc_id, signatures.c.session_id == session_id
                )
            )
            rows = [
                dict(
                    doc_id=doc_id,
                    session_id=session_id,
                    zone_id=str(s["zone_id"]),
                    signature_data=str(s["signature_data"]),
                    signed_at=s.get("signed_at") or now,
                )
                for s in signatures_in
            ]
            if rows:
                conn.execute(signatures.insert(), rows)
        return len(rows)

    def list_signatures(self, doc_id: str, session_id: str) -> List[Dict[str, Any]]:
        with self.engine.begin() as conn:
            q = (
                select(
                    signatures.c.doc_id,
                    signatures.c.session_id,
                    signatures.c.zone_id,
                    signatures.c.signature_data,
                    signatures.c.signed_at,
                )
                .select_from(
                    signatures.join(
                        zones,
                        (zones.c.doc_id == signatures.c.doc_id)
                        & (zones.c.zone_id == signatures.c.zone_id),
                    )
                )
                .where(signatures.c.doc_id == doc_id, signatures.c.session_id == session_id)
                .order_by(zones.c.order_index.asc())
            )
            return [dict(row) for row in conn.execute(q).mappings().all()]

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
