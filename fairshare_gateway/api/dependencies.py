"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session
from fairshare_gateway.config import settings
from fairshare_gateway.domain.exceptions import NotAuthenticatedError
from fairshare_gateway.domain.models import ReportDefaults
from fairshare_gateway.infrastructure.clients.mail import MailClient
from fairshare_gateway.infrastructure.database.repositories import UserRepository
from fairshare_gateway.infrastructure.database.session import get_db
from fairshare_gateway.infrastructure.events import DocumentEventDispatcher
from fairshare_gateway.services.notifications import NotificationDispatcher


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Authenticated user from the X-User-ID header set by the auth proxy"""
    if not x_user_id:
        raise NotAuthenticatedError("Missing X-User-ID header")
    return x_user_id


def get_mail_client() -> MailClient:
    """Provide mail transport client instance"""
    return MailClient()


def get_report_defaults() -> ReportDefaults:
    return ReportDefaults(
        default_category=settings.default_category,
        default_currency_symbol=settings.default_currency_symbol,
        top_n=settings.top_expenses_limit,
    )


def get_event_dispatcher(
    db: Session = Depends(get_db),
    mail_client: MailClient = Depends(get_mail_client),
    defaults: ReportDefaults = Depends(get_report_defaults),
) -> DocumentEventDispatcher:
    """Provide document event dispatcher wired to notification handlers"""
    notifications = NotificationDispatcher(
        get_user=UserRepository(db).get,
        mail_client=mail_client,
        defaults=defaults,
    )
    return DocumentEventDispatcher(notifications)
