from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import uuid4

from tikaz.application.dto.requests import (
    RespondContactRequest,
    SubmitContactRequest,
    UpdateContactStatusRequest,
)
from tikaz.application.dto.responses import (
    ContactResponse,
    ContactStatsResponse,
    ContactSummaryResponse,
    ContactTypeCountResponse,
)
from tikaz.application.mappers.contact_mapper import to_contact_response
from tikaz.application.mappers.event_envelope import serialize_contact_event
from tikaz.application.metrics.order_lifecycle import record_contact_received
from tikaz.application.ports.notifier import ContactNotifier
from tikaz.application.ports.publisher import ADMIN_TOPIC, EventPublisher, topic_channel
from tikaz.application.ports.repositories import ContactRepository
from tikaz.application.use_cases.best_effort import notify_best_effort, publish_best_effort
from tikaz.application.use_cases.context import TraceContext
from tikaz.domain.common.ids import ContactId
from tikaz.domain.contact.entities import (
    ContactMessage,
    ContactStatus,
    ContactType,
    InvalidContactReplyError,
)

logger = logging.getLogger(__name__)


class ContactNotFoundError(Exception):
    pass


class InvalidContactStatusError(Exception):
    pass


class InvalidContactResponseError(Exception):
    pass


def parse_contact_status(value: str) -> ContactStatus:
    try:
        return ContactStatus(value)
    except ValueError as exc:
        raise InvalidContactStatusError(f"invalid contact status: {value}") from exc


def _publish_contact_event(
    publisher: EventPublisher,
    event_type: str,
    contact: ContactMessage,
    trace_ctx: TraceContext,
) -> None:
    message = serialize_contact_event(
        event_type=event_type,
        topic=ADMIN_TOPIC,
        contact=contact,
        occurred_at=contact.updated_at,
        trace_id=trace_ctx.trace_id,
        request_id=trace_ctx.request_id,
    )
    publish_best_effort(
        publisher,
        channel=topic_channel(ADMIN_TOPIC),
        message=message,
        kind=event_type,
    )


class SubmitContact:
    def __init__(
        self,
        contact_repository: ContactRepository,
        publisher: EventPublisher,
        notifier: ContactNotifier,
    ) -> None:
        self._contact_repository = contact_repository
        self._publisher = publisher
        self._notifier = notifier

    def execute(
        self,
        request_dto: SubmitContactRequest,
        trace_ctx: TraceContext,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> ContactResponse:
        now = datetime.now(timezone.utc)
        contact = ContactMessage(
            contact_id=ContactId(f"ctc_{uuid4().hex[:12]}"),
            name=request_dto.name,
            email=request_dto.email,
            phone=request_dto.phone,
            subject=request_dto.subject,
            message=request_dto.message,
            type=ContactType(request_dto.type or ContactType.GENERAL.value),
            created_at=now,
            updated_at=now,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self._contact_repository.add(contact)
        record_contact_received(contact.type.value)
        logger.info(
            "contact_received",
            extra={"contact_id": str(contact.contact_id), "contact_type": contact.type.value},
        )

        notify_best_effort(
            lambda: self._notifier.notify_contact_received(contact),
            kind="contact_received",
        )
        notify_best_effort(
            lambda: self._notifier.notify_admin_new_contact(contact),
            kind="admin_new_contact",
        )
        _publish_contact_event(self._publisher, "contact.created", contact, trace_ctx)

        return to_contact_response(contact)


class GetContact:
    def __init__(self, contact_repository: ContactRepository) -> None:
        self._contact_repository = contact_repository

    def execute(self, contact_id: ContactId) -> ContactResponse:
        contact = self._contact_repository.get(contact_id)
        if contact is None:
            raise ContactNotFoundError(f"contact {contact_id} not found")
        return to_contact_response(contact)


class UpdateContactStatus:
    def __init__(self, contact_repository: ContactRepository, publisher: EventPublisher) -> None:
        self._contact_repository = contact_repository
        self._publisher = publisher

    def execute(
        self,
        contact_id: ContactId,
        request_dto: UpdateContactStatusRequest,
        trace_ctx: TraceContext,
    ) -> ContactResponse:
        status = parse_contact_status(request_dto.status)
        contact = self._contact_repository.get(contact_id)
        if contact is None:
            raise ContactNotFoundError(f"contact {contact_id} not found")

        updated = contact.update_status(
            status,
            now=datetime.now(timezone.utc),
            assigned_to=request_dto.assigned_to,
        )
        self._contact_repository.update(updated)
        logger.info(
            "contact_status_changed",
            extra={"contact_id": str(contact_id), "status": status.value},
        )
        _publish_contact_event(self._publisher, "contact.status_changed", updated, trace_ctx)
        return to_contact_response(updated)


class RespondToContact:
    def __init__(
        self,
        contact_repository: ContactRepository,
        publisher: EventPublisher,
        notifier: ContactNotifier,
    ) -> None:
        self._contact_repository = contact_repository
        self._publisher = publisher
        self._notifier = notifier

    def execute(
        self,
        contact_id: ContactId,
        request_dto: RespondContactRequest,
        trace_ctx: TraceContext,
    ) -> ContactResponse:
        contact = self._contact_repository.get(contact_id)
        if contact is None:
            raise ContactNotFoundError(f"contact {contact_id} not found")

        try:
            responded = contact.respond(
                message=request_dto.message or "",
                responded_by=request_dto.responded_by or "",
                now=datetime.now(timezone.utc),
            )
        except InvalidContactReplyError as exc:
            raise InvalidContactResponseError(str(exc)) from exc

        self._contact_repository.update(responded)
        logger.info("contact_responded", extra={"contact_id": str(contact_id)})

        notify_best_effort(
            lambda: self._notifier.notify_contact_response(responded),
            kind="contact_response",
        )
        _publish_contact_event(self._publisher, "contact.responded", responded, trace_ctx)
        return to_contact_response(responded)


class ContactStats:
    def __init__(self, contact_repository: ContactRepository) -> None:
        self._contact_repository = contact_repository

    def execute(self) -> ContactStatsResponse:
        summary = self._contact_repository.status_summary()
        by_type = sorted(summary.by_type, key=lambda row: (-row[1], row[0]))
        return ContactStatsResponse(
            summary=ContactSummaryResponse(
                total=summary.total,
                new=summary.new,
                inProgress=summary.in_progress,
                resolved=summary.resolved,
                closed=summary.closed,
            ),
            byType=[ContactTypeCountResponse(type=name, count=count) for name, count in by_type],
        )
