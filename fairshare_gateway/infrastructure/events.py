"""Document change events routed from the write path to notification handlers"""

import logging
from typing import Any, Dict

from fairshare_gateway.services.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)

DIRECT_EXPENSES = "directExpenses"


def friends_collection(owner_id: str) -> str:
    return f"users/{owner_id}/friends"


def _friends_owner(collection: str) -> str | None:
    """Owner id when collection is users/{id}/friends, else None"""
    parts = collection.split("/")
    if len(parts) == 3 and parts[0] == "users" and parts[2] == "friends":
        return parts[1]
    return None


class DocumentEventDispatcher:
    """
    Routes created/updated events by collection to the matching handler.

    Called after the triggering write has committed. Any error raised while
    handling is logged here so it never reaches the writer.
    """

    def __init__(self, notifications: NotificationDispatcher):
        self.notifications = notifications

    async def on_document_created(self, collection: str, doc_id: str, doc: Dict[str, Any]) -> None:
        try:
            owner_id = _friends_owner(collection)
            if owner_id is not None:
                await self.notifications.on_friend_request_created(owner_id, doc_id, doc)
            elif collection == DIRECT_EXPENSES:
                await self.notifications.on_direct_expense_created(doc_id, doc)
            else:
                logger.debug("No handler for created event", extra={"collection": collection})
        except Exception:
            logger.exception("Notification handler failed", extra={"collection": collection, "doc_id": doc_id})

    async def on_document_updated(
        self,
        collection: str,
        doc_id: str,
        before: Dict[str, Any],
        after: Dict[str, Any],
    ) -> None:
        try:
            owner_id = _friends_owner(collection)
            if owner_id is not None:
                await self.notifications.on_friend_request_accepted(owner_id, doc_id, before, after)
            else:
                logger.debug("No handler for updated event", extra={"collection": collection})
        except Exception:
            logger.exception("Notification handler failed", extra={"collection": collection, "doc_id": doc_id})
