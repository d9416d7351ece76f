"""Identity provider and per-user profile records.

The provider owns credentials (``credentials`` collection, bcrypt hashes) and
issues JWT bearer sessions. Profile records live in the ``users`` collection,
keyed by the identity's uid. Every sign-in, sign-out, account creation and
session restore is published to the provider's auth-state listeners.
"""

import bcrypt
import logging
import uuid
from jose import JWTError, jwt
from datetime import datetime, timedelta
from typing import Awaitable, Callable, List, Optional
from fastapi import Depends
from fastapi.security import HTTPBearer

from store_ratings.core.config import settings
from store_ratings.core.errors import AuthError
from store_ratings.db.session import get_db
from store_ratings.models.user import Identity, User, ROLE_USER
from store_ratings.utils.validators import validate_email, validate_password

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

AuthStateListener = Callable[[Optional[Identity]], Awaitable[None]]

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))

def normalize_email(email: str) -> str:
    """Emails identify accounts case-insensitively."""
    return email.strip().lower()

def create_access_token(uid: str, email: str, expires_delta: Optional[timedelta] = None):
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    token_id = str(uuid.uuid4())
    to_encode = {"sub": uid, "email": email, "jti": token_id, "iat": now, "exp": expire}
    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.ALGORITHM)
    return encoded_jwt, Identity(uid=uid, email=email, token_id=token_id, issued_at=now.replace(microsecond=0))


class IdentityProvider:
    def __init__(self, db):
        self.db = db
        self.current_identity: Optional[Identity] = None
        self.current_token: Optional[str] = None
        self._listeners: List[AuthStateListener] = []

    def on_auth_state_changed(self, listener: AuthStateListener) -> Callable[[], None]:
        """Subscribe to session changes; returns the unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _publish(self, identity: Optional[Identity], token: Optional[str] = None):
        self.current_identity = identity
        self.current_token = token if identity else None
        for listener in list(self._listeners):
            await listener(identity)

    async def create_account(self, email: str, password: str) -> Identity:
        """Create credentials and switch the active session to the new account."""
        email = normalize_email(email)
        if validate_email(email):
            raise AuthError("auth/invalid-email")
        weakness = validate_password(password)
        if weakness:
            raise AuthError("auth/weak-password", reason=weakness)
        if await self.db.credentials.find_one({"email": email}):
            raise AuthError("auth/email-already-in-use")

        uid = str(uuid.uuid4())
        await self.db.credentials.insert_one({
            "uid": uid,
            "email": email,
            "hashed_password": hash_password(password),
            "created_at": datetime.utcnow(),
        })
        token, identity = create_access_token(uid, email)
        await self._publish(identity, token)
        return identity

    async def _check_throttle(self, email: str):
        window_start = datetime.utcnow() - timedelta(minutes=settings.LOGIN_ATTEMPT_WINDOW_MINUTES)
        attempts = await self.db.login_attempts.find({"email": email}).to_list(1000)
        recent = [a for a in attempts if a["created_at"] >= window_start]
        if len(recent) >= settings.MAX_LOGIN_ATTEMPTS:
            raise AuthError("auth/too-many-requests")

    async def _record_failure(self, email: str):
        await self.db.login_attempts.insert_one({"email": email, "created_at": datetime.utcnow()})

    async def sign_in(self, email: str, password: str) -> str:
        email = normalize_email(email)
        await self._check_throttle(email)

        credential = await self.db.credentials.find_one({"email": email})
        if not credential:
            await self._record_failure(email)
            raise AuthError("auth/user-not-found")
        if not verify_password(password, credential["hashed_password"]):
            await self._record_failure(email)
            raise AuthError("auth/invalid-credential")

        await self.db.login_attempts.delete_many({"email": email})
        token, identity = create_access_token(credential["uid"], credential["email"])
        await self._publish(identity, token)
        return token

    async def sign_out(self):
        identity = self.current_identity
        if identity and identity.token_id:
            await self.db.revoked_tokens.insert_one({
                "jti": identity.token_id,
                "user_id": identity.uid,
                "revoked_at": datetime.utcnow(),
            })
        await self._publish(None)

    async def restore(self, token: Optional[str]) -> Optional[Identity]:
        """Resolve a bearer token into the active session (or none)."""
        identity = None
        if token:
            identity = await self._decode(token)
        await self._publish(identity, token)
        return identity

    async def _decode(self, token: str) -> Optional[Identity]:
        try:
            payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.ALGORITHM])
        except JWTError:
            return None
        uid = payload.get("sub")
        if uid is None:
            return None
        if await self.db.revoked_tokens.find_one({"jti": payload.get("jti")}):
            return None
        credential = await self.db.credentials.find_one({"uid": uid})
        if credential is None:
            return None
        issued_at = datetime.utcfromtimestamp(payload["iat"]) if "iat" in payload else None
        return Identity(uid=uid, email=credential["email"], token_id=payload.get("jti"), issued_at=issued_at)

    async def reauthenticate(self, password: str):
        if self.current_identity is None:
            raise AuthError("auth/requires-recent-login")
        credential = await self.db.credentials.find_one({"uid": self.current_identity.uid})
        if not credential or not verify_password(password, credential["hashed_password"]):
            raise AuthError("auth/wrong-password")

    async def update_password(self, new_password: str):
        identity = self.current_identity
        if identity is None:
            raise AuthError("auth/requires-recent-login")
        weakness = validate_password(new_password)
        if weakness:
            raise AuthError("auth/weak-password", reason=weakness)
        await self.db.credentials.update_one(
            {"uid": identity.uid},
            {"$set": {"hashed_password": hash_password(new_password), "updated_at": datetime.utcnow()}}
        )

    def signed_in_recently(self) -> bool:
        identity = self.current_identity
        if identity is None or identity.issued_at is None:
            return False
        return datetime.utcnow() - identity.issued_at <= timedelta(minutes=settings.RECENT_LOGIN_MINUTES)


def get_identity_provider(db=Depends(get_db)) -> IdentityProvider:
    return IdentityProvider(db)


# Profile records

async def sign_up_user(db, provider: IdentityProvider, email: str, password: str, name: str,
                       address: str, role: str = ROLE_USER) -> User:
    try:
        identity = await provider.create_account(email, password)
        user = User(id=identity.uid, name=name, email=identity.email, address=address, role=role)
        await db.users.insert_one(user.model_dump())
        return user
    except Exception as e:
        logger.error(f"Error signing up: {str(e)}")
        raise

async def create_admin_user(db, provider: IdentityProvider, email: str, password: str, name: str,
                            address: str, role: str) -> User:
    """Create an account on behalf of the signed-in admin.

    Account creation switches the active session to the new identity, so the
    new session is signed out and the admin's session restored afterwards,
    whether or not the profile record could be written.
    """
    admin_token = provider.current_token
    try:
        identity = await provider.create_account(email, password)
        try:
            user = User(id=identity.uid, name=name, email=identity.email, address=address, role=role)
            await db.users.insert_one(user.model_dump())
        finally:
            await provider.sign_out()
            if admin_token:
                await provider.restore(admin_token)
        return user
    except Exception as e:
        logger.error(f"Error creating user: {str(e)}")
        raise

async def update_user_data(db, user_id: str, data: dict):
    try:
        await db.users.update_one({"id": user_id}, {"$set": data})
    except Exception as e:
        logger.error(f"Error updating user: {str(e)}")
        raise

async def get_current_user_data(db, user_id: str) -> Optional[User]:
    try:
        user = await db.users.find_one({"id": user_id})
        return User(**user) if user else None
    except Exception as e:
        logger.error(f"Error getting user data: {str(e)}")
        raise

async def update_user_password(provider: IdentityProvider, new_password: str,
                               current_password: Optional[str] = None):
    try:
        if current_password is not None:
            await provider.reauthenticate(current_password)
        elif not provider.signed_in_recently():
            raise AuthError("auth/requires-recent-login")
        await provider.update_password(new_password)
    except Exception as e:
        logger.error(f"Error updating password: {str(e)}")
        raise
