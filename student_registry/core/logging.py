"""
Structured logging for auditability.
All side effects must be logged.
"""
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional
import json

from bson import ObjectId


class MongoEncoder(json.JSONEncoder):
    """JSON encoder that handles ObjectId and datetime values."""
    def default(self, obj):
        if isinstance(obj, ObjectId):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


class AuditLogger:
    """
    Audit logger for tracking all system side effects.
    Logs are structured JSON for easy parsing and analysis.
    """

    def __init__(self, name: str = "student_registry"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Console handler with JSON formatting
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setLevel(logging.INFO)
            formatter = logging.Formatter('%(message)s')
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def _log(
        self,
        level: str,
        event: str,
        target_type: Optional[str] = None,
        target_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        error: Optional[str] = None
    ) -> None:
        """Internal logging method that produces structured JSON."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "event": event,
            "target": {
                "type": target_type,
                "id": target_id
            } if target_type else None,
            "details": details,
            "error": error
        }

        # Remove None values for cleaner logs
        log_entry = {k: v for k, v in log_entry.items() if v is not None}

        log_method = getattr(self.logger, level.lower())
        log_method(json.dumps(log_entry, cls=MongoEncoder))

    def info(
        self,
        event: str,
        target_type: Optional[str] = None,
        target_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None
    ) -> None:
        """Log an informational event."""
        self._log("INFO", event, target_type, target_id, details)

    def warning(
        self,
        event: str,
        target_type: Optional[str] = None,
        target_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None
    ) -> None:
        """Log a warning event."""
        self._log("WARNING", event, target_type, target_id, details)

    def error(
        self,
        event: str,
        error: str,
        target_type: Optional[str] = None,
        target_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None
    ) -> None:
        """Log an error event."""
        self._log("ERROR", event, target_type, target_id, details, error)

    # Specific audit events
    def log_user_created(self, user_id: str, role: str) -> None:
        """Log user creation. The password never reaches the log."""
        self.info(
            "user.created",
            target_type="user",
            target_id=user_id,
            details={"role": role}
        )

    def log_student_created(self, student_id: str, user_ref: str) -> None:
        """Log student creation."""
        self.info(
            "student.created",
            target_type="student",
            target_id=student_id,
            details={"user": user_ref}
        )

    def log_student_deleted(self, student_id: str) -> None:
        """Log a soft delete."""
        self.info(
            "student.deleted",
            target_type="student",
            target_id=student_id,
            details={"soft": True}
        )

    def log_create_rolled_back(self, user_id: str, reason: str) -> None:
        """Log the compensating delete of a user whose student failed to persist."""
        self.warning(
            "student.create.rolled_back",
            target_type="user",
            target_id=user_id,
            details={"reason": reason}
        )

    def log_request_failed(
        self,
        method: str,
        path: str,
        kind: str,
        error: str
    ) -> None:
        """Log a request that ended in an error response."""
        self.error(
            "request.failed",
            error=error,
            details={"method": method, "path": path, "kind": kind}
        )


# Global audit logger instance
audit_log = AuditLogger()
