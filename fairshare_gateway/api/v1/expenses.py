"""POST /v1/direct-expenses - record an expense between two users"""

import logging
from datetime import datetime
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.orm import Session

from fairshare_gateway.api.v1.schemas import DirectExpenseCreate, DirectExpenseResponse
from fairshare_gateway.api.dependencies import get_current_user_id, get_event_dispatcher
from fairshare_gateway.infrastructure.database.repositories import ExpenseRepository, UserRepository, expense_document
from fairshare_gateway.infrastructure.database.session import get_db
from fairshare_gateway.infrastructure.events import DIRECT_EXPENSES, DocumentEventDispatcher
from fairshare_gateway.utils.date_utils import to_local_naive

router = APIRouter()


@router.post("/direct-expenses", response_model=DirectExpenseResponse, status_code=201)
def create_direct_expense(
    request_body: DirectExpenseCreate,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    events: DocumentEventDispatcher = Depends(get_event_dispatcher),
):
    """
    Persist a direct expense paid by the caller.

    The participant is notified by email after the write commits;
    delivery problems never affect this response.
    """
    if request_body.participant_id == user_id:
        raise HTTPException(status_code=400, detail="Participant must be another user")

    users = UserRepository(db)
    payer = users.get(user_id)
    if payer is None or users.get(request_body.participant_id) is None:
        raise HTTPException(status_code=404, detail="User not found")

    record = ExpenseRepository(db).create(
        payer=payer,
        description=request_body.description,
        category=request_body.category,
        amount=request_body.amount,
        participant_id=request_body.participant_id,
        participant_owed_amount=request_body.participant_owed_amount,
        currency_code=request_body.currency_code.upper(),
        date=to_local_naive(request_body.date or datetime.now()),
    )
    db.commit()

    background_tasks.add_task(events.on_document_created, DIRECT_EXPENSES, record.id, expense_document(record))

    logging.info("Direct expense created", extra={"user_id": user_id, "expense_id": record.id})
    return DirectExpenseResponse(
        expense_id=record.id,
        payer_id=record.payer_id,
        participant_id=record.participant_id,
        description=record.description,
        category=record.category,
        amount=record.amount,
        participant_owed_amount=record.participant_owed_amount,
        currency_code=record.currency_code,
        date=record.date,
    )
