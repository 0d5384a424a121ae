# app/services/auth_service.py
import logging
import uuid
from typing import Callable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.constants import USER_COLLECTION
from core.events import AuthEvent, EventChannel
from core.exceptions import AuthenticationError, ConflictError
from core.security import (
    create_access_token, decode_payload, hash_credential, revoke_token, verify_credential,
)
from schemas.auth import AuthUser, IdentityRegister, SignInResult, SignInStep, Token
from services.admin_service import AdminService
from services.document_store import DocumentStore
from utils.timestamps import utcnow

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[SignInStep], None]


class AuthService:
    def __init__(self, db: AsyncSession, events: Optional[EventChannel] = None):
        self.db = db
        self.store = DocumentStore(db)
        self.events = events

    async def _publish(self, kind: str, principal: str, **payload):
        if self.events is not None:
            await self.events.publish(AuthEvent(kind=kind, principal=principal, payload=payload))

    async def _to_user(self, data: dict) -> AuthUser:
        is_admin = await AdminService(self.db).is_admin(data["principal"])
        return AuthUser(
            principal=data["principal"],
            display_name=data["display_name"],
            email=data.get("email"),
            created_at=data["created_at"],
            last_sign_in_at=data.get("last_sign_in_at"),
            is_admin=is_admin,
        )

    # ---------- identities ----------
    async def register_identity(self, data: IdentityRegister) -> AuthUser:
        principal = data.principal or str(uuid.uuid4())
        if await self.store.get_doc(USER_COLLECTION, principal) is not None:
            raise ConflictError("Identity already registered")

        identity = {
            "principal": principal,
            "display_name": data.display_name,
            "email": data.email,
            "hashed_credential": hash_credential(data.credential),
            "created_at": utcnow().isoformat(),
            "last_sign_in_at": None,
        }
        await self.store.set_doc(USER_COLLECTION, principal, identity, caller=principal)
        logger.info(f"Identity {principal} registered")
        return await self._to_user(identity)

    async def get_user(self, principal: str) -> AuthUser:
        doc = await self.store.get_doc(USER_COLLECTION, principal)
        if doc is None:
            raise AuthenticationError("User not authenticated")
        return await self._to_user(doc.data)

    # ---------- sign-in wizard ----------
    async def sign_in(
            self,
            principal: str,
            credential: str,
            on_progress: Optional[ProgressCallback] = None,
    ) -> SignInResult:
        steps: List[SignInStep] = []

        def progress(step: SignInStep):
            steps.append(step)
            if on_progress is not None:
                on_progress(step)

        progress(SignInStep.REQUESTING_USER_CREDENTIAL)
        doc = await self.store.get_doc(USER_COLLECTION, principal)
        if doc is None:
            logger.warning(f"Sign-in attempt for unknown identity {principal}")
            raise AuthenticationError("Invalid credentials")

        progress(SignInStep.FINALIZING_CREDENTIAL)
        if not verify_credential(credential, doc.data.get("hashed_credential") or ""):
            logger.warning(f"Sign-in attempt with wrong credential for {principal}")
            raise AuthenticationError("Invalid credentials")

        progress(SignInStep.SIGNING)
        access_token = create_access_token(principal)

        progress(SignInStep.FINALIZING_SESSION)
        identity = {**doc.data, "last_sign_in_at": utcnow().isoformat()}
        await self.store.set_doc(USER_COLLECTION, principal, identity, caller=principal)

        progress(SignInStep.RETRIEVING_USER)
        user = await self._to_user(identity)

        await self._publish("signed_in", principal, is_admin=user.is_admin)
        return SignInResult(token=Token(access_token=access_token), user=user, steps=steps)

    async def sign_out(self, token: str) -> None:
        payload = decode_payload(token)
        await revoke_token(payload)
        await self._publish("signed_out", payload["sub"])
