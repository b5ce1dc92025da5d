from __future__ import annotations

from fastapi import APIRouter, Request, status

from tikaz.api.middleware.request_id import get_request_id
from tikaz.application.dto.requests import (
    RespondContactRequest,
    SubmitContactRequest,
    UpdateContactStatusRequest,
)
from tikaz.application.dto.responses import ContactResponse, ContactStatsResponse
from tikaz.application.use_cases.contact_inbox import (
    ContactStats,
    GetContact,
    RespondToContact,
    SubmitContact,
    UpdateContactStatus,
)
from tikaz.application.use_cases.context import TraceContext
from tikaz.domain.common.ids import ContactId
from tikaz.infrastructure.db.repositories.contact_repo import SqlAlchemyContactRepository
from tikaz.infrastructure.email.smtp_notifier import SmtpNotifier
from tikaz.infrastructure.messaging.redis_publisher import RedisEventPublisher
from tikaz.infrastructure.observability.otel import current_trace_id

router = APIRouter(prefix="/api/contact", tags=["contact"])


def _trace_ctx() -> TraceContext:
    return TraceContext(trace_id=current_trace_id(), request_id=get_request_id())


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.client.host if request.client else None


@router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
def submit_contact(request_dto: SubmitContactRequest, request: Request) -> ContactResponse:
    use_case = SubmitContact(
        contact_repository=SqlAlchemyContactRepository(),
        publisher=RedisEventPublisher(),
        notifier=SmtpNotifier(),
    )
    return use_case.execute(
        request_dto=request_dto,
        trace_ctx=_trace_ctx(),
        ip_address=_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )


@router.get("/stats/summary", response_model=ContactStatsResponse)
def contact_stats() -> ContactStatsResponse:
    return ContactStats(SqlAlchemyContactRepository()).execute()


@router.get("/{contact_id}", response_model=ContactResponse)
def get_contact(contact_id: str) -> ContactResponse:
    return GetContact(SqlAlchemyContactRepository()).execute(ContactId(contact_id))


@router.patch("/{contact_id}/status", response_model=ContactResponse)
def update_contact_status(
    contact_id: str,
    request_dto: UpdateContactStatusRequest,
) -> ContactResponse:
    use_case = UpdateContactStatus(
        contact_repository=SqlAlchemyContactRepository(),
        publisher=RedisEventPublisher(),
    )
    return use_case.execute(ContactId(contact_id), request_dto, trace_ctx=_trace_ctx())


@router.post("/{contact_id}/respond", response_model=ContactResponse)
def respond_to_contact(contact_id: str, request_dto: RespondContactRequest) -> ContactResponse:
    use_case = RespondToContact(
        contact_repository=SqlAlchemyContactRepository(),
        publisher=RedisEventPublisher(),
        notifier=SmtpNotifier(),
    )
    return use_case.execute(ContactId(contact_id), request_dto, trace_ctx=_trace_ctx())
