from __future__ import annotations

from sqlalchemy import Engine, func, select, update
from sqlalchemy.orm import Session

from tikaz.application.ports.repositories import (
    ContactFilter,
    ContactRepository,
    ContactStatusSummaryData,
)
from tikaz.domain.common.ids import ContactId
from tikaz.domain.contact.entities import (
    ContactMessage,
    ContactPriority,
    ContactReply,
    ContactStatus,
    ContactType,
)
from tikaz.infrastructure.db.models.contact import ContactModel
from tikaz.infrastructure.db.repositories.keyset import apply_newest_first, as_utc, split_page
from tikaz.infrastructure.db.session import get_engine


class SqlAlchemyContactRepository(ContactRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def add(self, contact: ContactMessage) -> None:
        with Session(self._engine) as session:
            session.add(self._to_model(contact))
            session.commit()

    def get(self, contact_id: ContactId) -> ContactMessage | None:
        statement = select(ContactModel).where(ContactModel.id == str(contact_id)).limit(1)
        with Session(self._engine) as session:
            model = session.execute(statement).scalar_one_or_none()
            if model is None:
                return None
            return self._to_domain(model)

    def update(self, contact: ContactMessage) -> None:
        reply = contact.reply
        statement = (
            update(ContactModel)
            .where(ContactModel.id == str(contact.contact_id))
            .values(
                status=contact.status.value,
                priority=contact.priority.value,
                assigned_to=contact.assigned_to,
                response_message=reply.message if reply else None,
                responded_by=reply.responded_by if reply else None,
                responded_at=reply.responded_at if reply else None,
                updated_at=contact.updated_at,
            )
        )
        with Session(self._engine) as session:
            session.execute(statement)
            session.commit()

    def list_filtered(
        self,
        contact_filter: ContactFilter,
        limit: int,
        cursor: str | None,
    ) -> tuple[list[ContactMessage], str | None]:
        statement = select(ContactModel)
        if contact_filter.status is not None:
            statement = statement.where(ContactModel.status == contact_filter.status.value)
        if contact_filter.type is not None:
            statement = statement.where(ContactModel.type == contact_filter.type.value)
        if contact_filter.priority is not None:
            statement = statement.where(ContactModel.priority == contact_filter.priority.value)
        statement = apply_newest_first(statement, ContactModel, cursor, limit)

        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
            page_models, next_cursor = split_page(models, limit)
            return [self._to_domain(model) for model in page_models], next_cursor

    def status_summary(self) -> ContactStatusSummaryData:
        by_status_statement = select(ContactModel.status, func.count(ContactModel.id)).group_by(
            ContactModel.status
        )
        by_type_statement = (
            select(ContactModel.type, func.count(ContactModel.id))
            .group_by(ContactModel.type)
            .order_by(func.count(ContactModel.id).desc(), ContactModel.type.asc())
        )
        with Session(self._engine) as session:
            by_status = {status: int(count) for status, count in session.execute(by_status_statement)}
            by_type = [(contact_type, int(count)) for contact_type, count in session.execute(by_type_statement)]

        return ContactStatusSummaryData(
            total=sum(by_status.values()),
            new=by_status.get(ContactStatus.NEW.value, 0),
            in_progress=by_status.get(ContactStatus.IN_PROGRESS.value, 0),
            resolved=by_status.get(ContactStatus.RESOLVED.value, 0),
            closed=by_status.get(ContactStatus.CLOSED.value, 0),
            by_type=by_type,
        )

    def _to_model(self, contact: ContactMessage) -> ContactModel:
        reply = contact.reply
        return ContactModel(
            id=str(contact.contact_id),
            name=contact.name,
            email=contact.email,
            phone=contact.phone,
            subject=contact.subject,
            message=contact.message,
            type=contact.type.value,
            priority=contact.priority.value,
            status=contact.status.value,
            assigned_to=contact.assigned_to,
            response_message=reply.message if reply else None,
            responded_by=reply.responded_by if reply else None,
            responded_at=reply.responded_at if reply else None,
            ip_address=contact.ip_address,
            user_agent=contact.user_agent,
            created_at=contact.created_at,
            updated_at=contact.updated_at,
        )

    def _to_domain(self, model: ContactModel) -> ContactMessage:
        reply = None
        if model.response_message is not None:
            reply = ContactReply(
                message=model.response_message,
                responded_by=model.responded_by or "",
                responded_at=as_utc(model.responded_at or model.updated_at),
            )
        return ContactMessage(
            contact_id=ContactId(model.id),
            name=model.name,
            email=model.email,
            phone=model.phone,
            subject=model.subject,
            message=model.message,
            type=ContactType(model.type),
            priority=ContactPriority(model.priority),
            status=ContactStatus(model.status),
            assigned_to=model.assigned_to,
            reply=reply,
            ip_address=model.ip_address,
            user_agent=model.user_agent,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )
