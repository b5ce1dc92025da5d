from __future__ import annotations

from tikaz.application.dto.responses import ContactReplyResponse, ContactResponse
from tikaz.domain.contact.entities import ContactMessage


def to_contact_response(contact: ContactMessage) -> ContactResponse:
    reply = None
    if contact.reply is not None:
        reply = ContactReplyResponse(
            message=contact.reply.message,
            respondedBy=contact.reply.responded_by,
            respondedAt=contact.reply.responded_at,
        )
    return ContactResponse(
        contactId=str(contact.contact_id),
        name=contact.name,
        email=contact.email,
        phone=contact.phone,
        subject=contact.subject,
        message=contact.message,
        type=contact.type.value,
        priority=contact.priority.value,
        status=contact.status.value,
        assignedTo=contact.assigned_to,
        response=reply,
        createdAt=contact.created_at,
        updatedAt=contact.updated_at,
    )
