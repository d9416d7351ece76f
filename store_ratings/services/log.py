from fastapi import Request
from typing import List, Optional
import logging

from store_ratings.models.log import ActivityLog
from store_ratings.utils.helpers import sort_by_key

logger = logging.getLogger(__name__)

async def log_activity(
    db,
    user_id: str,
    user_name: str,
    action: str,
    details: str,
    target_id: Optional[str] = None,
    target_type: Optional[str] = None,
    request: Optional[Request] = None
):
    """Record a user action for admin monitoring"""
    try:
        log_data = {
            "user_id": user_id,
            "user_name": user_name,
            "action": action,
            "details": details,
            "target_id": target_id,
            "target_type": target_type,
        }

        if request:
            # Get IP address (handle proxy headers)
            ip = request.headers.get("x-forwarded-for")
            if ip:
                ip = ip.split(',')[0].strip()
            else:
                ip = request.client.host if request.client else "unknown"

            log_data["ip_address"] = ip
            log_data["user_agent"] = request.headers.get("user-agent", "unknown")

        activity_log = ActivityLog(**log_data)
        await db.activity_logs.insert_one(activity_log.model_dump())
    except Exception as e:
        # Don't fail the main operation if logging fails
        logger.error(f"Failed to log activity: {str(e)}")

async def get_recent_activity(db, query: Optional[dict] = None, limit: int = 10) -> List[ActivityLog]:
    """Newest activity first; ordering is done in memory"""
    logs = await db.activity_logs.find(query or {}).to_list(1000)
    logs = sort_by_key(logs, "created_at", "desc")[:limit]
    return [ActivityLog(**log) for log in logs]
