from fastapi import FastAPI, APIRouter
from starlette.middleware.cors import CORSMiddleware
import logging

from store_ratings.core.config import settings
from store_ratings.core.errors import (
    AuthError,
    RedirectRequired,
    auth_error_handler,
    redirect_required_handler,
    unhandled_error_handler,
)
from store_ratings.db.session import close_mongo_connection
from store_ratings.routers import admin, auth, pages, store_owner, stores, users

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Store Ratings API")

# Create a router with the /api prefix
api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(stores.router)
api_router.include_router(users.router)
api_router.include_router(admin.router)
api_router.include_router(store_owner.router)
# Catch-all 404 lives here, so it goes last
api_router.include_router(pages.router)

# Include the router in the main app
app.include_router(api_router)

app.add_exception_handler(AuthError, auth_error_handler)
app.add_exception_handler(RedirectRequired, redirect_required_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("shutdown")
async def shutdown_db_client():
    logger.info("Closing MongoDB connection")
    close_mongo_connection()
