# app/services/cause_service.py
import logging
import uuid
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from core.constants import CAUSE_COLLECTION, CAUSE_FOLLOWERS_COLLECTION
from core.exceptions import BackendError, NotFoundError, ValidationFailedError
from schemas.cause import Cause, CauseCreate, CauseStatus, CauseUpdate
from services.document_store import DocumentStore
from utils.timestamps import utcnow

logger = logging.getLogger(__name__)


class CauseService:
    def __init__(self, db: AsyncSession, store: Optional[DocumentStore] = None):
        self.db = db
        self.store = store or DocumentStore(db)

    @staticmethod
    def _to_cause(doc) -> Cause:
        return Cause(id=doc.key, **{k: v for k, v in doc.data.items() if k != "id"})

    async def _save(self, cause: Cause, caller: Optional[str]) -> Cause:
        await self.store.set_doc(
            CAUSE_COLLECTION, cause.id, cause.model_dump(mode="json"), caller=caller
        )
        return cause

    # ---------- read ----------
    async def list_causes(
            self,
            include_inactive: bool = False,
            status: Optional[CauseStatus] = None,
    ) -> List[Cause]:
        """Causes ordered by sort order, then name"""
        try:
            docs = await self.store.list_docs(CAUSE_COLLECTION)
        except HTTPException as e:
            logger.error(f"Error listing causes: {e.detail}")
            raise BackendError("Failed to list causes") from e

        causes = [self._to_cause(doc) for doc in docs.items]
        if not include_inactive:
            causes = [c for c in causes if c.is_active]
        if status is not None:
            causes = [c for c in causes if c.status == status]
        return sorted(causes, key=lambda c: (c.sort_order, c.name.lower()))

    async def get_cause(self, cause_id: str) -> Cause:
        doc = await self.store.get_doc(CAUSE_COLLECTION, cause_id)
        if doc is None:
            raise NotFoundError(f"Cause not found: {cause_id}")
        return self._to_cause(doc)

    async def ensure_exist(self, cause_ids: List[str]) -> None:
        for cause_id in cause_ids:
            if await self.store.get_doc(CAUSE_COLLECTION, cause_id) is None:
                raise NotFoundError(f"Cause not found: {cause_id}")

    # ---------- write ----------
    async def create_cause(self, data: CauseCreate, created_by: str) -> Cause:
        now = utcnow()
        cause = Cause(
            id=str(uuid.uuid4()),
            **data.model_dump(),
            followers=0,
            funds_raised=0.0,
            created_by=created_by,
            updated_by=created_by,
            created_at=now,
            updated_at=now,
        )
        await self._save(cause, created_by)
        logger.info(f"Cause {cause.id} ({cause.name}) created by {created_by}")
        return cause

    async def update_cause(self, cause_id: str, data: CauseUpdate, updated_by: str) -> Cause:
        cause = await self.get_cause(cause_id)
        changes = {
            key: value for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None
        }
        cause = cause.model_copy(update={**changes, "updated_by": updated_by, "updated_at": utcnow()})
        return await self._save(cause, updated_by)

    async def set_cause_status(self, cause_id: str, status: CauseStatus, updated_by: str) -> Cause:
        cause = await self.get_cause(cause_id)
        cause = cause.model_copy(update={"status": status, "updated_by": updated_by, "updated_at": utcnow()})
        return await self._save(cause, updated_by)

    async def delete_cause(self, cause_id: str, deleted_by: str) -> None:
        await self.store.delete_doc(CAUSE_COLLECTION, cause_id, caller=deleted_by)
        logger.info(f"Cause {cause_id} deleted by {deleted_by}")

    async def follow_cause(self, cause_id: str, follower: str) -> Cause:
        cause = await self.get_cause(cause_id)
        if not cause.is_active or cause.status != CauseStatus.APPROVED:
            raise ValidationFailedError("Only active, approved causes can be followed")

        follow_key = f"{cause_id}:{follower}"
        if await self.store.get_doc(CAUSE_FOLLOWERS_COLLECTION, follow_key) is not None:
            return cause
        await self.store.set_doc(
            CAUSE_FOLLOWERS_COLLECTION,
            follow_key,
            {"cause_id": cause_id, "follower": follower, "followed_at": utcnow().isoformat()},
            caller=follower,
        )
        cause = cause.model_copy(update={"followers": cause.followers + 1, "updated_at": utcnow()})
        return await self._save(cause, follower)

    async def add_funds(self, cause_id: str, amount: float, caller: Optional[str] = None) -> Cause:
        cause = await self.get_cause(cause_id)
        cause = cause.model_copy(update={
            "funds_raised": round(cause.funds_raised + amount, 2),
            "updated_at": utcnow(),
        })
        return await self._save(cause, caller)
