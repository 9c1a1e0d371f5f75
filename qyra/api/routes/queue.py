"""Queue routes: public join/status endpoints and admin controls."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request, status

from qyra.core.config import settings
from qyra.core.rate_limit import limiter
from qyra.core.rbac import RequireAdmin
from qyra.core.responses import success_response
from qyra.db.session import DbSession
from qyra.schemas.queue import JoinRequest, QueueEntryOut
from qyra.services.queue_service import QueueService

router = APIRouter()


def get_queue_service(db: DbSession) -> QueueService:
    return QueueService(db)


QueueSvc = Annotated[QueueService, Depends(get_queue_service)]


# --------------- public ---------------


@router.post("/join", status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.join_rate_limit)
def join_queue(request: Request, body: JoinRequest, service: QueueSvc):
    """Join the queue and receive a token."""
    result = service.join(
        name=body.name,
        phone=body.phone,
        email=body.email,
        customer_type=body.customer_type,
    )
    return success_response(result.to_json(), status_code=status.HTTP_201_CREATED)


@router.get("/status/{entry_id}")
def get_queue_status(entry_id: int, service: QueueSvc):
    """Status, position and estimated wait for one token."""
    return success_response(service.get_status(entry_id).to_json())


@router.get("/current")
def get_current_serving(service: QueueSvc):
    current = service.current_serving_view()
    if current is None:
        return success_response(None, "No one is currently being served")
    return success_response(current.to_json())


@router.get("/list")
def get_queue_list(
    service: QueueSvc,
    entry_status: Optional[str] = Query(None, alias="status"),
    customer_type: Optional[str] = Query(None, alias="type"),
):
    """Queue in canonical order, optionally filtered by status and customer type."""
    listing = service.list_queue(status=entry_status, customer_type=customer_type)
    return success_response(listing.to_json())


# --------------- admin ---------------


@router.put("/start/{entry_id}")
def start_serving(entry_id: int, service: QueueSvc, current_user: RequireAdmin):
    entry = service.start_serving(entry_id)
    return success_response(QueueEntryOut.model_validate(entry).to_json(), "Started serving customer")


@router.put("/complete/{entry_id}")
def complete_serving(entry_id: int, service: QueueSvc, current_user: RequireAdmin):
    entry = service.complete_serving(entry_id)
    return success_response(QueueEntryOut.model_validate(entry).to_json(), "Service completed")


@router.put("/priority/{entry_id}")
def increase_priority(entry_id: int, service: QueueSvc, current_user: RequireAdmin):
    entry = service.increase_priority(entry_id)
    return success_response(QueueEntryOut.model_validate(entry).to_json(), "Priority increased")


@router.get("/stats")
def get_queue_stats(service: QueueSvc, current_user: RequireAdmin):
    return success_response(service.get_stats().to_json())


@router.delete("/{entry_id}")
def remove_from_queue(entry_id: int, service: QueueSvc, current_user: RequireAdmin):
    """Permanently delete an entry, whatever its status."""
    removed = service.remove(entry_id)
    return success_response(removed.to_json(), "Customer removed from queue")
