"""Route guard.

Mirrors the client route table: public views, guest-only views (login and
register), views for any signed-in user, and role-restricted views.
"""

from typing import Optional, Sequence, Tuple
from fastapi import Depends
from pydantic import BaseModel

from store_ratings.core.errors import RedirectRequired
from store_ratings.models.user import ROLE_ADMIN, ROLE_STORE_OWNER
from store_ratings.services.session import AuthContext, get_auth_context

LOGIN_ROUTE = "/login"
HOME_ROUTE = "/"

PUBLIC = "public"
GUEST_ONLY = "guest"

# (path pattern, access) where access is PUBLIC, GUEST_ONLY or the allowed
# roles; an empty tuple means any signed-in user. First match wins.
CLIENT_ROUTES: Sequence[Tuple[str, object]] = (
    ("/", PUBLIC),
    ("/login", GUEST_ONLY),
    ("/register", GUEST_ONLY),
    ("/stores", PUBLIC),
    ("/stores/:id", PUBLIC),
    ("/profile", ()),
    ("/update-password", ()),
    ("/admin/dashboard", (ROLE_ADMIN,)),
    ("/admin/users", (ROLE_ADMIN,)),
    ("/admin/stores", (ROLE_ADMIN,)),
    ("/admin/users/new", (ROLE_ADMIN,)),
    ("/admin/users/:id", (ROLE_ADMIN,)),
    ("/store-owner/dashboard", (ROLE_STORE_OWNER,)),
)


class RouteDecision(BaseModel):
    path: str
    allowed: bool
    redirect_to: Optional[str] = None
    not_found: bool = False


def resolve_redirect(context: AuthContext, allowed_roles: Sequence[str] = ()) -> Optional[str]:
    """Where a restricted navigation must go instead, or None if permitted."""
    if not context.is_authenticated:
        return LOGIN_ROUTE
    if allowed_roles and context.role not in allowed_roles:
        return HOME_ROUTE
    return None


def _matches(pattern: str, path: str) -> bool:
    expected = pattern.strip("/").split("/")
    actual = path.strip("/").split("/")
    if len(expected) != len(actual):
        return False
    return all((e.startswith(":") and bool(a)) or e == a for e, a in zip(expected, actual))


def match_route(path: str) -> Optional[Tuple[str, object]]:
    path = path.split("?", 1)[0] or "/"
    for pattern, access in CLIENT_ROUTES:
        if _matches(pattern, path):
            return pattern, access
    return None


def check_route(path: str, context: AuthContext) -> RouteDecision:
    route = match_route(path)
    if route is None:
        return RouteDecision(path=path, allowed=True, not_found=True)

    _, access = route
    if access == PUBLIC:
        return RouteDecision(path=path, allowed=True)
    if access == GUEST_ONLY:
        if context.is_authenticated:
            return RouteDecision(path=path, allowed=False, redirect_to=HOME_ROUTE)
        return RouteDecision(path=path, allowed=True)

    redirect = resolve_redirect(context, access)
    return RouteDecision(path=path, allowed=redirect is None, redirect_to=redirect)


def require_session(*roles: str):
    """Dependency factory: signed-in session, optionally limited to ``roles``."""
    async def guard(context: AuthContext = Depends(get_auth_context)) -> AuthContext:
        redirect = resolve_redirect(context, roles)
        if redirect == LOGIN_ROUTE:
            raise RedirectRequired(LOGIN_ROUTE, "Authentication required")
        if redirect:
            raise RedirectRequired(HOME_ROUTE, "You do not have access to this page")
        return context
    return guard


async def require_guest(context: AuthContext = Depends(get_auth_context)) -> AuthContext:
    if context.is_authenticated:
        raise RedirectRequired(HOME_ROUTE, "Already signed in")
    return context
