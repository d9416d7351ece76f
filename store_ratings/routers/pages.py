from fastapi import APIRouter, Depends, HTTPException

from store_ratings.services.guard import RouteDecision, check_route
from store_ratings.services.session import AuthContext, get_auth_context

router = APIRouter()

@router.get("/")
async def home(context: AuthContext = Depends(get_auth_context)):
    """Landing view: where the current visitor can go next"""
    links = [{"label": "Browse Stores", "path": "/stores"}]
    if not context.is_authenticated:
        links += [
            {"label": "Create Free Account", "path": "/register"},
            {"label": "Sign In", "path": "/login"},
        ]
    elif context.is_admin:
        links.append({"label": "Go to Admin Dashboard", "path": "/admin/dashboard"})
    elif context.is_store_owner:
        links.append({"label": "Go to Store Dashboard", "path": "/store-owner/dashboard"})

    return {
        "message": "Discover and Rate the Best Stores",
        "signed_in": context.is_authenticated,
        "links": links,
    }

@router.get("/navigate", response_model=RouteDecision)
async def navigate(path: str, context: AuthContext = Depends(get_auth_context)):
    """Tell a client whether it may show ``path`` or must redirect"""
    return check_route(path, context)

# Must be registered last
@router.api_route("/{path:path}", methods=["GET", "POST", "PUT", "DELETE"], include_in_schema=False)
async def not_found(path: str):
    raise HTTPException(status_code=404, detail="Page not found")
