# app/services/document_store.py
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import BackendError, NotFoundError
from models.document import Document
from schemas.document import ListParams
from services.hooks import AssertContext, DELETE_ASSERTIONS, SET_ASSERTIONS

logger = logging.getLogger(__name__)

Assertion = Callable[["DocumentStore", AssertContext], Awaitable[None]]


@dataclass
class DocList:
    items: List[Document] = field(default_factory=list)
    matches_length: int = 0

    @property
    def items_length(self) -> int:
        return len(self.items)


class DocumentStore:
    """Document API of the satellite: collections of keyed JSON documents."""

    def __init__(
            self,
            db: AsyncSession,
            set_assertions: Optional[Dict[str, Assertion]] = None,
            delete_assertions: Optional[Dict[str, Assertion]] = None,
    ):
        self.db = db
        self.set_assertions = SET_ASSERTIONS if set_assertions is None else set_assertions
        self.delete_assertions = DELETE_ASSERTIONS if delete_assertions is None else delete_assertions

    # ---------- read ----------
    async def get_doc(self, collection: str, key: str) -> Optional[Document]:
        """Return the document, or None when the key is absent."""
        try:
            result = await self.db.execute(
                select(Document).where(
                    Document.collection == collection,
                    Document.key == key,
                )
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to read {collection}/{key}: {str(e)}")
            raise BackendError(f"Failed to read document {collection}/{key}") from e
        return result.scalar_one_or_none()

    async def list_docs(self, collection: str, params: Optional[ListParams] = None) -> DocList:
        params = params or ListParams()

        query = select(Document).where(Document.collection == collection)
        if params.owner:
            query = query.where(Document.owner == params.owner)
        if params.key_prefix:
            query = query.where(Document.key.startswith(params.key_prefix))

        order_column = getattr(Document, params.order_by.value)
        if params.descending:
            query = query.order_by(order_column.desc(), Document.id.desc())
        else:
            query = query.order_by(order_column.asc(), Document.id.asc())

        count_query = select(func.count()).select_from(
            query.order_by(None).subquery()
        )

        if params.start_after:
            query = query.offset(params.start_after)
        if params.limit:
            query = query.limit(params.limit)

        try:
            matches = (await self.db.execute(count_query)).scalar() or 0
            items = (await self.db.execute(query)).scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list {collection}: {str(e)}")
            raise BackendError(f"Failed to list collection {collection}") from e

        return DocList(items=list(items), matches_length=matches)

    async def count_docs(self, collection: str) -> int:
        try:
            result = await self.db.execute(
                select(func.count(Document.id)).where(Document.collection == collection)
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to count {collection}: {str(e)}")
            raise BackendError(f"Failed to count collection {collection}") from e
        return result.scalar() or 0

    # ---------- write ----------
    async def set_doc(
            self,
            collection: str,
            key: str,
            data: Dict[str, Any],
            caller: Optional[str] = None,
    ) -> Document:
        """Create or replace a document. The last write wins."""
        existing = await self.get_doc(collection, key)

        assertion = self.set_assertions.get(collection)
        if assertion is not None:
            await assertion(self, AssertContext(
                collection=collection,
                key=key,
                caller=caller,
                before=dict(existing.data) if existing is not None else None,
                proposed=data,
            ))

        try:
            if existing is None:
                doc = Document(
                    collection=collection,
                    key=key,
                    data=dict(data),
                    owner=caller,
                    version=1,
                )
                self.db.add(doc)
            else:
                doc = existing
                doc.data = dict(data)
                doc.owner = caller or doc.owner
                doc.version = (doc.version or 0) + 1

            await self.db.commit()
            await self.db.refresh(doc)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to write {collection}/{key}: {str(e)}")
            raise BackendError(f"Failed to write document {collection}/{key}") from e

        return doc

    async def delete_doc(self, collection: str, key: str, caller: Optional[str] = None) -> None:
        existing = await self.get_doc(collection, key)
        if existing is None:
            raise NotFoundError(f"Document not found: {collection}/{key}")

        assertion = self.delete_assertions.get(collection)
        if assertion is not None:
            await assertion(self, AssertContext(
                collection=collection,
                key=key,
                caller=caller,
                before=dict(existing.data),
            ))

        try:
            await self.db.delete(existing)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to delete {collection}/{key}: {str(e)}")
            raise BackendError(f"Failed to delete document {collection}/{key}") from e
