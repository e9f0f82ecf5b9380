from __future__ import annotations

from typing import Optional, Union

from fastapi import APIRouter, Depends

from comicstore import cancellations
from comicstore.database import Database
from comicstore.models import User
from comicstore.routes.deps import CamelModel, current_user, get_db, ok, paged

router = APIRouter(prefix="/cancellation-requests", tags=["cancellations"])


class CreateCancellationRequest(CamelModel):
    order_id: Optional[int] = None
    reason: Optional[str] = None


class UpdateCancellationRequest(CamelModel):
    reason: Optional[str] = None
    decision: Optional[Union[int, str]] = None
    reply_content: Optional[str] = None


@router.post("", status_code=201)
def create_request(req: CreateCancellationRequest, db: Database = Depends(get_db),
                   user: User = Depends(current_user)):
    request = cancellations.create_cancellation(db, user, req.order_id, req.reason)
    return ok(request, "Cancellation request created")


@router.get("/user")
def list_own(page: Optional[str] = None, limit: Optional[str] = None,
             db: Database = Depends(get_db), user: User = Depends(current_user)):
    return paged(cancellations.list_cancellations(db, user, None, page, limit))


@router.get("/user/{user_id}")
def list_for_user(user_id: int, page: Optional[str] = None, limit: Optional[str] = None,
                  db: Database = Depends(get_db), user: User = Depends(current_user)):
    return paged(cancellations.list_cancellations(db, user, user_id, page, limit))


@router.get("/{request_id}")
def get_request(request_id: int, db: Database = Depends(get_db),
                user: User = Depends(current_user)):
    return ok(cancellations.get_cancellation(db, request_id, user))


@router.put("/{request_id}")
def update_request(request_id: int, req: UpdateCancellationRequest,
                   db: Database = Depends(get_db), user: User = Depends(current_user)):
    request = cancellations.update_cancellation(
        db, request_id, user,
        reason=req.reason, decision=req.decision, reply_content=req.reply_content,
    )
    return ok(request, "Cancellation request updated")


@router.delete("/{request_id}")
def delete_request(request_id: int, db: Database = Depends(get_db),
                   user: User = Depends(current_user)):
    cancellations.delete_cancellation(db, request_id, user)
    return ok(message="Cancellation request deleted")
