from datetime import datetime, timezone

import pytest
from jose import jwt

from conftest import SUPER_ADMIN_ID
from core.config import settings
from core.events import EventChannel
from core.exceptions import AuthenticationError, ConflictError
from core.security import (
    create_access_token, decode_payload, decode_token, hash_credential, verify_credential,
)
from schemas.auth import IdentityRegister, SignInStep
from services.auth_service import AuthService


def identity(principal="alice", credential="correct horse"):
    return IdentityRegister(principal=principal, display_name=principal.title(), credential=credential)


class TestSecurity:
    def test_credential_hashing(self):
        hashed = hash_credential("correct horse")
        assert hashed != "correct horse"
        assert verify_credential("correct horse", hashed)
        assert not verify_credential("wrong horse", hashed)

    def test_token_claims(self):
        payload = decode_payload(create_access_token("alice", extra_data={"scope": "donor"}))
        assert payload["sub"] == "alice"
        assert payload["type"] == "access"
        assert payload["scope"] == "donor"
        assert payload["jti"]

    def test_expired_token(self):
        with pytest.raises(AuthenticationError):
            decode_payload(create_access_token("alice", expires_minutes=-1))

    def test_foreign_signature(self):
        token = jwt.encode(
            {"sub": "alice", "exp": datetime.now(timezone.utc).timestamp() + 60},
            "another-secret",
            algorithm=settings.ALGORITHM,
        )
        with pytest.raises(AuthenticationError):
            decode_payload(token)


class TestRegistration:
    @pytest.mark.anyio
    async def test_register(self, db):
        user = await AuthService(db).register_identity(identity())
        assert user.principal == "alice"
        assert user.display_name == "Alice"
        assert not user.is_admin
        assert user.last_sign_in_at is None

    @pytest.mark.anyio
    async def test_generated_principal(self, db):
        user = await AuthService(db).register_identity(
            IdentityRegister(display_name="Anon", credential="long enough")
        )
        assert len(user.principal) == 36

    @pytest.mark.anyio
    async def test_duplicate(self, db):
        service = AuthService(db)
        await service.register_identity(identity())
        with pytest.raises(ConflictError):
            await service.register_identity(identity())


class TestSignIn:
    @pytest.mark.anyio
    async def test_wizard_steps_in_order(self, db):
        service = AuthService(db)
        await service.register_identity(identity())
        progress = []

        result = await service.sign_in("alice", "correct horse", on_progress=progress.append)

        expected = [
            SignInStep.REQUESTING_USER_CREDENTIAL,
            SignInStep.FINALIZING_CREDENTIAL,
            SignInStep.SIGNING,
            SignInStep.FINALIZING_SESSION,
            SignInStep.RETRIEVING_USER,
        ]
        assert progress == expected
        assert result.steps == expected
        assert result.user.last_sign_in_at is not None
        assert await decode_token(result.token.access_token) == "alice"

    @pytest.mark.anyio
    async def test_admin_flag(self, db, super_admin):
        service = AuthService(db)
        await service.register_identity(identity(SUPER_ADMIN_ID))

        result = await service.sign_in(SUPER_ADMIN_ID, "correct horse")
        assert result.user.is_admin

    @pytest.mark.anyio
    async def test_wrong_credential_stops_after_credential_step(self, db):
        service = AuthService(db)
        await service.register_identity(identity())
        progress = []

        with pytest.raises(AuthenticationError) as exc_info:
            await service.sign_in("alice", "wrong horse", on_progress=progress.append)

        assert exc_info.value.status_code == 401
        assert progress == [SignInStep.REQUESTING_USER_CREDENTIAL, SignInStep.FINALIZING_CREDENTIAL]

    @pytest.mark.anyio
    async def test_unknown_principal(self, db):
        with pytest.raises(AuthenticationError):
            await AuthService(db).sign_in("nobody", "whatever")

    @pytest.mark.anyio
    async def test_sign_out_revokes_token(self, db):
        service = AuthService(db)
        await service.register_identity(identity())
        token = (await service.sign_in("alice", "correct horse")).token.access_token

        await service.sign_out(token)

        with pytest.raises(AuthenticationError):
            await decode_token(token)

    @pytest.mark.anyio
    async def test_events_published(self, db):
        channel = EventChannel()
        events = []
        channel.subscribe(lambda event: events.append((event.kind, event.principal)))
        service = AuthService(db, channel)
        await service.register_identity(identity())

        token = (await service.sign_in("alice", "correct horse")).token.access_token
        await service.sign_out(token)

        assert events == [("signed_in", "alice"), ("signed_out", "alice")]

    @pytest.mark.anyio
    async def test_get_user(self, db):
        service = AuthService(db)
        await service.register_identity(identity())

        assert (await service.get_user("alice")).principal == "alice"
        with pytest.raises(AuthenticationError):
            await service.get_user("nobody")
