"""Best-effort email notifications for friend requests and direct expenses"""

from typing import Any, Callable, Dict, Optional

from fairshare_gateway.config import settings
from fairshare_gateway.domain.exceptions import (
    ReferenceNotFoundError,
    TransportFailureError,
    TransportUnavailableError,
)
from fairshare_gateway.domain.models import EmailMessage, FriendRequest, FriendStatus, ReportDefaults, User
from fairshare_gateway.domain.notifications import (
    display_name,
    expense_created_email,
    format_amount,
    friend_accepted_email,
    friend_request_email,
)
from fairshare_gateway.infrastructure.clients.mail import MailClient
from fairshare_gateway.infrastructure.observability.logging import log_notification
from fairshare_gateway.infrastructure.observability.metrics import record_notification

UserLookup = Callable[[str], Optional[User]]

FRIEND_REQUEST_CREATED = "friend_request_created"
FRIEND_REQUEST_ACCEPTED = "friend_request_accepted"
DIRECT_EXPENSE_CREATED = "direct_expense_created"


class NotificationDispatcher:
    """
    Turns document change events into transactional emails.

    Every handler is fire-and-forget: a missing user, an unconfigured
    transport or a failed delivery is logged and the handler returns None.
    Nothing is retried and nothing is raised back to the writer.
    """

    def __init__(
        self,
        get_user: UserLookup,
        mail_client: MailClient,
        sender: str | None = None,
        app_url: str | None = None,
        defaults: ReportDefaults | None = None,
    ):
        self.get_user = get_user
        self.mail_client = mail_client
        self.sender = sender or settings.mail_from
        self.app_url = app_url or settings.app_url
        self.defaults = defaults or ReportDefaults(
            default_category=settings.default_category,
            default_currency_symbol=settings.default_currency_symbol,
        )

    async def on_friend_request_created(self, owner_id: str, friend_id: str, doc: Dict[str, Any]) -> None:
        """Email the recipient of an incoming pending request"""
        request = FriendRequest.from_document(doc)
        if request.status != FriendStatus.PENDING.value or request.requested_by == owner_id:
            self._skip(FRIEND_REQUEST_CREATED, "not an incoming request", owner_id=owner_id, friend_id=friend_id)
            return None

        try:
            if not request.friend_email:
                raise ReferenceNotFoundError(f"Friend request from {friend_id} has no sender email")
            recipient = self._require_user(owner_id)
            message = friend_request_email(
                recipient_email=recipient.email,
                recipient_name=display_name(recipient.display_name, recipient.email),
                sender_name=display_name(request.friend_name, request.friend_email),
                sender_email=request.friend_email,
                sender=self.sender,
                app_url=self.app_url,
            )
        except ReferenceNotFoundError as e:
            self._skip(FRIEND_REQUEST_CREATED, str(e), owner_id=owner_id)
            return None

        await self._deliver(FRIEND_REQUEST_CREATED, message)
        return None

    async def on_friend_request_accepted(
        self,
        owner_id: str,
        friend_id: str,
        before: Dict[str, Any],
        after: Dict[str, Any],
    ) -> None:
        """Email the original requester when the recipient accepts"""
        previous, current = FriendRequest.from_document(before), FriendRequest.from_document(after)
        if previous.status != FriendStatus.PENDING.value or current.status != FriendStatus.ACCEPTED.value:
            self._skip(FRIEND_REQUEST_ACCEPTED, "not a pending -> accepted transition", owner_id=owner_id)
            return None
        # The requester's own copy flips too; only the accepter's copy notifies.
        if current.requested_by == owner_id:
            self._skip(FRIEND_REQUEST_ACCEPTED, "requester copy", owner_id=owner_id)
            return None

        try:
            accepter = self._require_user(owner_id)
            requester = self._require_user(current.friend_user_id)
            message = friend_accepted_email(
                requester_email=requester.email,
                requester_name=display_name(requester.display_name, requester.email),
                accepter_name=display_name(accepter.display_name, accepter.email),
                sender=self.sender,
                app_url=self.app_url,
            )
        except ReferenceNotFoundError as e:
            self._skip(FRIEND_REQUEST_ACCEPTED, str(e), owner_id=owner_id)
            return None

        await self._deliver(FRIEND_REQUEST_ACCEPTED, message)
        return None

    async def on_direct_expense_created(self, expense_id: str, doc: Dict[str, Any]) -> None:
        """Email the non-paying participant of a new direct expense"""
        try:
            participant = self._require_user(doc["participant_id"])
            owed = format_amount(
                doc.get("participant_owed_amount", 0),
                doc.get("currency_code") or "USD",
                self.defaults.default_currency_symbol,
            )
            message = expense_created_email(
                participant_email=participant.email,
                participant_name=display_name(participant.display_name, participant.email),
                payer_name=display_name(doc.get("payer_name"), doc["payer_email"]),
                description=doc.get("description", ""),
                owed=owed,
                category=doc.get("category") or self.defaults.default_category,
                sender=self.sender,
                app_url=self.app_url,
            )
        except ReferenceNotFoundError as e:
            self._skip(DIRECT_EXPENSE_CREATED, str(e), expense_id=expense_id)
            return None

        await self._deliver(DIRECT_EXPENSE_CREATED, message, expense_id=expense_id)
        return None

    def _require_user(self, user_id: Optional[str]) -> User:
        user = self.get_user(user_id) if user_id else None
        if user is None:
            raise ReferenceNotFoundError(f"User {user_id} not found")
        return user

    async def _deliver(self, event: str, message: EmailMessage, **fields: Any) -> None:
        try:
            await self.mail_client.send(message)
        except TransportUnavailableError as e:
            self._skip(event, str(e), to=message.to, **fields)
            return
        except TransportFailureError as e:
            record_notification(event, "failed")
            log_notification(event, "failed", str(e), to=message.to, **fields)
            return

        record_notification(event, "sent")
        log_notification(event, "sent", f"email sent to {message.to}", to=message.to, **fields)

    def _skip(self, event: str, reason: str, **fields: Any) -> None:
        record_notification(event, "skipped")
        log_notification(event, "skipped", reason, **fields)
