# app/services/audit_service.py
import logging
import uuid
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from core.constants import AUDIT_COLLECTION, HEALTH_CHECK_KEY
from core.exceptions import AuditError
from schemas.audit import AuditEntry
from schemas.document import ListOrderField, ListParams
from services.document_store import DocumentStore
from utils.timestamps import now_ms

logger = logging.getLogger(__name__)


class AuditService:
    """Append-only log of administrative actions."""

    def __init__(self, db: AsyncSession, store: Optional[DocumentStore] = None):
        self.db = db
        self.store = store or DocumentStore(db)

    async def log(
            self,
            action: str,
            target_user_id: str,
            performed_by: str,
            details: str = "",
            user_agent: Optional[str] = None,
            strict: bool = False,
    ) -> Optional[AuditEntry]:
        """Write one audit entry.

        Failures are logged and swallowed unless ``strict`` is set, in which
        case an ``AuditError`` is raised so the caller can compensate.
        """
        timestamp = now_ms()
        key = f"{timestamp}-{action}-{uuid.uuid4().hex[:8]}"
        entry = AuditEntry(
            key=key,
            action=action,
            target_user_id=target_user_id,
            performed_by=performed_by,
            timestamp=timestamp,
            details=details,
            user_agent=user_agent or "server",
        )

        try:
            await self.store.set_doc(
                AUDIT_COLLECTION,
                key,
                entry.model_dump(mode="json", exclude={"key"}),
                caller=performed_by,
            )
        except HTTPException as e:
            logger.error(f"Failed to log audit {action} on {target_user_id}: {e.detail}")
            if strict:
                raise AuditError(f"Audit log write failed: {e.detail}") from e
            return None

        return entry

    async def list_entries(
            self,
            action: Optional[str] = None,
            target_user_id: Optional[str] = None,
            performed_by: Optional[str] = None,
            limit: int = 100,
    ) -> List[AuditEntry]:
        """Audit entries, newest first."""
        docs = await self.store.list_docs(
            AUDIT_COLLECTION,
            ListParams(order_by=ListOrderField.CREATED_AT, descending=True),
        )

        entries = []
        for doc in docs.items:
            if doc.key == HEALTH_CHECK_KEY:
                continue
            entry = AuditEntry(key=doc.key, **doc.data)
            if action and entry.action != action:
                continue
            if target_user_id and entry.target_user_id != target_user_id:
                continue
            if performed_by and entry.performed_by != performed_by:
                continue
            entries.append(entry)
            if len(entries) >= limit:
                break
        return entries
