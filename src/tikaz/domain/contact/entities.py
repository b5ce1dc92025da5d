from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from tikaz.domain.common.ids import ContactId


class ContactType(str, Enum):
    GENERAL = "general"
    COMPLAINT = "complaint"
    SUGGESTION = "suggestion"
    PARTNERSHIP = "partnership"
    TECHNICAL = "technical"


class ContactPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ContactStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


@dataclass(frozen=True)
class ContactReply:
    message: str
    responded_by: str
    responded_at: datetime


@dataclass(frozen=True)
class ContactMessage:
    contact_id: ContactId
    name: str
    email: str
    subject: str
    message: str
    created_at: datetime
    updated_at: datetime
    phone: str | None = None
    type: ContactType = ContactType.GENERAL
    priority: ContactPriority = ContactPriority.MEDIUM
    status: ContactStatus = ContactStatus.NEW
    assigned_to: str | None = None
    reply: ContactReply | None = None
    ip_address: str | None = None
    user_agent: str | None = None

    def __post_init__(self) -> None:
        if not self.subject.strip():
            raise ValueError("subject must be non-empty")
        if not self.message.strip():
            raise ValueError("message must be non-empty")
        object.__setattr__(self, "email", self.email.strip().lower())

    def update_status(
        self,
        status: ContactStatus,
        now: datetime,
        assigned_to: str | None = None,
    ) -> ContactMessage:
        return replace(
            self,
            status=status,
            assigned_to=assigned_to or self.assigned_to,
            updated_at=now,
        )

    def respond(self, message: str, responded_by: str, now: datetime) -> ContactMessage:
        if not message.strip() or not responded_by.strip():
            raise InvalidContactReplyError("reply message and responder name are required")
        return replace(
            self,
            reply=ContactReply(message=message, responded_by=responded_by, responded_at=now),
            status=ContactStatus.RESOLVED,
            updated_at=now,
        )


class InvalidContactReplyError(Exception):
    pass
