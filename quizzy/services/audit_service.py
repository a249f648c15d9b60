"""
Audit trail for admin mutations
"""
import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import Request

from quizzy.defaults import utc_now_iso

logger = logging.getLogger(__name__)

ACTING_USER_HEADER = "X-Admin-User"


class AuditService:
    """Appends audit entries to the store document inside the caller's transaction"""

    def record(
        self,
        document: Dict[str, Any],
        request: Optional[Request],
        action: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        entry = {
            "id": uuid.uuid4().hex,
            "userId": "admin",
            "action": action,
            "details": details or {},
            "timestamp": utc_now_iso(),
            "ipAddress": None,
            "userAgent": None,
        }

        if request is not None:
            entry["userId"] = request.headers.get(ACTING_USER_HEADER, "admin")
            entry["ipAddress"] = request.client.host if request.client else None
            entry["userAgent"] = request.headers.get("user-agent")

        document["auditLogs"].append(entry)
        logger.info(f"Audit: {entry['userId']} {action} {entry['details']}")
        return entry


# Global instance
audit_service = AuditService()
