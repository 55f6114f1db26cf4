"""Notification data models."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from resilinked.utils import parse_datetime


class NotificationType(str, Enum):
    """Kinds of in-app notifications."""

    JOB_MATCH = "job_match"
    JOB_APPLIED = "job_applied"
    APPLICATION_SENT = "application_sent"
    APPLICATION_CANCELLED = "application_cancelled"
    JOB_ACCEPTED = "job_accepted"
    APPLICATION_REJECTED = "application_rejected"
    APPLICATION_UPDATE = "application_update"


@dataclass
class Notification:
    """A message for one recipient, usually about a job."""

    recipient: str
    type: str
    message: str
    related_job: Optional[str] = None
    title: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    is_read: bool = False
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.recipient:
            raise ValueError("Notification recipient is required")
        if not self.message:
            raise ValueError("Notification message is required")
        valid = {t.value for t in NotificationType}
        if self.type not in valid:
            raise ValueError(f"Invalid notification type: {self.type}. Must be one of {valid}")
        if self.created_at is None:
            self.created_at = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "recipient": self.recipient,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "related_job": self.related_job,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Notification":
        return cls(
            id=data["id"],
            recipient=data["recipient"],
            type=data["type"],
            title=data.get("title"),
            message=data["message"],
            related_job=data.get("related_job"),
            is_read=data.get("is_read", False),
            created_at=parse_datetime(data.get("created_at")),
        )
