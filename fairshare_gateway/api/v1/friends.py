"""POST /v1/friends - friend requests and acceptance"""

import logging
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fairshare_gateway.api.v1.schemas import FriendRequestCreate, FriendshipResponse
from fairshare_gateway.api.dependencies import get_current_user_id, get_event_dispatcher
from fairshare_gateway.domain.exceptions import InvalidTransitionError, ReferenceNotFoundError
from fairshare_gateway.infrastructure.database.models import FriendshipRecord
from fairshare_gateway.infrastructure.database.repositories import (
    FriendshipRepository,
    UserRepository,
    friendship_document,
)
from fairshare_gateway.infrastructure.database.session import get_db
from fairshare_gateway.infrastructure.events import DocumentEventDispatcher, friends_collection

router = APIRouter()


def _to_response(record: FriendshipRecord) -> FriendshipResponse:
    return FriendshipResponse(
        owner_id=record.owner_id,
        friend_user_id=record.friend_user_id,
        friend_email=record.friend_email,
        friend_name=record.friend_name,
        requested_by=record.requested_by,
        status=record.status,
    )


@router.post("/friends/requests", response_model=FriendshipResponse, status_code=201)
def send_friend_request(
    request_body: FriendRequestCreate,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    events: DocumentEventDispatcher = Depends(get_event_dispatcher),
):
    """
    Create a pending friend request.

    Both sides of the relationship are written; a created event is raised
    for each and the notification handler emails only the recipient.
    """
    if request_body.friend_user_id == user_id:
        raise HTTPException(status_code=400, detail="Cannot send a friend request to yourself")

    users = UserRepository(db)
    requester = users.get(user_id)
    recipient = users.get(request_body.friend_user_id)
    if requester is None or recipient is None:
        raise HTTPException(status_code=404, detail="User not found")

    friendships = FriendshipRepository(db)
    if friendships.get(user_id, recipient.user_id) is not None:
        raise HTTPException(status_code=409, detail="Friend request already exists")

    try:
        requester_copy, recipient_copy = friendships.create_request(requester, recipient)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Friend request already exists")

    for record in (requester_copy, recipient_copy):
        background_tasks.add_task(
            events.on_document_created,
            friends_collection(record.owner_id),
            record.friend_user_id,
            friendship_document(record),
        )

    logging.info("Friend request created", extra={"user_id": user_id, "friend_user_id": recipient.user_id})
    return _to_response(requester_copy)


@router.post("/friends/{friend_user_id}/accept", response_model=FriendshipResponse)
def accept_friend_request(
    friend_user_id: str,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    events: DocumentEventDispatcher = Depends(get_event_dispatcher),
):
    """Accept a pending request from friend_user_id (pending -> accepted only)"""
    try:
        changes = FriendshipRepository(db).accept(user_id, friend_user_id)
        db.commit()
    except ReferenceNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidTransitionError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))

    for record, before, after in changes:
        background_tasks.add_task(
            events.on_document_updated,
            friends_collection(record.owner_id),
            record.friend_user_id,
            before,
            after,
        )

    logging.info("Friend request accepted", extra={"user_id": user_id, "friend_user_id": friend_user_id})
    return _to_response(changes[0][0])
