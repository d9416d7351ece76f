"""Session state derived from the identity provider's auth-state events."""

import logging
from typing import Callable, Optional
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials

from store_ratings.db.session import get_db
from store_ratings.models.user import Identity, SessionInfo, User, ROLE_ADMIN, ROLE_STORE_OWNER, ROLE_USER
from store_ratings.services.auth import IdentityProvider, get_current_user_data, get_identity_provider, security

logger = logging.getLogger(__name__)


class AuthContext:
    """Current identity, its profile record and derived role flags.

    ``loading`` stays True until the first auth-state event is handled.
    """

    def __init__(self, db):
        self.db = db
        self.identity: Optional[Identity] = None
        self.profile: Optional[User] = None
        self.loading = True
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self, provider: IdentityProvider):
        self.detach()
        self._unsubscribe = provider.on_auth_state_changed(self.handle_auth_state_changed)

    def detach(self):
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    async def handle_auth_state_changed(self, identity: Optional[Identity]):
        self.identity = identity
        if identity:
            await self._fetch_profile(identity)
        else:
            self.profile = None
        self.loading = False

    async def _fetch_profile(self, identity: Identity):
        try:
            self.profile = await get_current_user_data(self.db, identity.uid)
        except Exception as e:
            logger.error(f"Error fetching user data: {str(e)}")
            self.profile = None

    async def refresh_user_data(self):
        """Re-read the profile, e.g. after an admin edit or profile update."""
        if self.identity:
            await self._fetch_profile(self.identity)

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def role(self) -> Optional[str]:
        return self.profile.role if self.profile else None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_store_owner(self) -> bool:
        return self.role == ROLE_STORE_OWNER

    @property
    def is_normal_user(self) -> bool:
        return self.role == ROLE_USER

    def snapshot(self) -> SessionInfo:
        return SessionInfo(
            identity=self.identity,
            profile=self.profile,
            is_admin=self.is_admin,
            is_store_owner=self.is_store_owner,
            is_normal_user=self.is_normal_user,
            loading=self.loading,
        )


async def get_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    provider: IdentityProvider = Depends(get_identity_provider),
    db=Depends(get_db),
) -> AuthContext:
    context = AuthContext(db)
    context.attach(provider)
    await provider.restore(credentials.credentials if credentials else None)
    return context
