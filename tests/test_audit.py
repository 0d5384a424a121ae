import pytest

from core.constants import AUDIT_COLLECTION, HEALTH_CHECK_KEY, SYSTEM_CALLER
from core.exceptions import AuditError, BackendError
from schemas.audit import AuditAction
from services.audit_service import AuditService
from services.document_store import DocumentStore
from services.hooks import SET_ASSERTIONS


async def audit_down(store, ctx):
    raise BackendError("audit collection unavailable")


def failing_audit(db):
    return AuditService(db, DocumentStore(db, set_assertions={**SET_ASSERTIONS, AUDIT_COLLECTION: audit_down}))


class TestAuditLog:
    @pytest.mark.anyio
    async def test_entry_key_format(self, db):
        entry = await AuditService(db).log(AuditAction.ADD_ADMIN.value, "u1", "root", details="{}")

        timestamp, action, suffix = entry.key.split("-", 2)
        assert int(timestamp) == entry.timestamp
        assert action == "add_admin"
        assert len(suffix) == 8
        assert entry.user_agent == "server"

    @pytest.mark.anyio
    async def test_best_effort_failure_returns_none(self, db):
        assert await failing_audit(db).log(AuditAction.UPDATE_ADMIN.value, "u1", "root") is None

    @pytest.mark.anyio
    async def test_strict_failure_raises(self, db):
        with pytest.raises(AuditError) as exc_info:
            await failing_audit(db).log(AuditAction.REMOVE_ADMIN.value, "u1", "root", strict=True)
        assert "Audit log write failed" in exc_info.value.detail

    @pytest.mark.anyio
    async def test_invalid_action_is_rejected_by_store(self, db):
        assert await AuditService(db).log("drop_admins", "u1", "root") is None
        assert await AuditService(db).list_entries() == []


class TestAuditQueries:
    @pytest.mark.anyio
    async def test_newest_first_with_filters(self, db):
        service = AuditService(db)
        await service.log(AuditAction.ADD_ADMIN.value, "u1", "root")
        await service.log(AuditAction.UPDATE_ADMIN.value, "u1", "root")
        await service.log(AuditAction.ADD_ADMIN.value, "u2", "other")

        entries = await service.list_entries()
        assert [(e.action, e.target_user_id) for e in entries] == [
            ("add_admin", "u2"), ("update_admin", "u1"), ("add_admin", "u1"),
        ]
        assert [e.target_user_id for e in await service.list_entries(action="add_admin")] == ["u2", "u1"]
        assert len(await service.list_entries(target_user_id="u1")) == 2
        assert len(await service.list_entries(performed_by="other")) == 1
        assert len(await service.list_entries(limit=1)) == 1

    @pytest.mark.anyio
    async def test_health_probe_is_hidden(self, db):
        await DocumentStore(db).set_doc(AUDIT_COLLECTION, HEALTH_CHECK_KEY, {
            "action": "health_check",
            "target_user_id": HEALTH_CHECK_KEY,
            "performed_by": SYSTEM_CALLER,
            "timestamp": 1,
        })
        assert await AuditService(db).list_entries() == []
