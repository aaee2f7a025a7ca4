"""File movement API - request, charge, return, and movement log maintenance."""
from uuid import UUID
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic.alias_generators import to_camel

from efiling.dependencies import current_actor, get_engine, require_admin_actor
from efiling.schemas.movement import (
    ChargeEntry,
    ChargeRequest,
    MovementHistoryResponse,
    MovementResponse,
    RequestEntry,
    ReturnEntry,
)
from efiling.services.access_policy import Actor
from efiling.services.movement_engine import MovementEngine
from efiling.services.results import OperationResult, ResultStatus

router = APIRouter(prefix="/api/file-movement", tags=["file-movement"])

HTTP_STATUS = {
    ResultStatus.SUCCESS: 200,
    ResultStatus.ALREADY_SATISFIED: 200,
    ResultStatus.NOT_FOUND: 404,
    ResultStatus.CONFLICT: 409,
    ResultStatus.FORBIDDEN: 403,
    ResultStatus.VALIDATION_ERROR: 422,
    ResultStatus.PARTIAL_FAILURE: 500,
}


@router.put("/{user_id}/request/{file_id}", response_model=MovementResponse)
async def request_file(
    user_id: UUID,
    file_id: UUID,
    actor: Actor = Depends(current_actor),
    engine: MovementEngine = Depends(get_engine),
):
    """Check a file out of the registry to a user."""
    return to_http_response(await engine.request_file(actor, file_id, user_id))


@router.put("/{user_id}/charge/{file_id}", response_model=MovementResponse)
async def charge_file(
    user_id: UUID,
    file_id: UUID,
    body: ChargeRequest,
    actor: Actor = Depends(current_actor),
    engine: MovementEngine = Depends(get_engine),
):
    """Charge a file held by user_id to another user."""
    result = await engine.charge_file(
        actor,
        file_id,
        from_user_id=user_id,
        to_user_id=body.user_to_id,
        remark=body.remark,
        page_index=body.page_index,
        document_id=body.document_id,
        document_type=body.document_type,
    )
    return to_http_response(result)


@router.put("/{user_id}/return/{file_id}", response_model=MovementResponse)
async def return_file(
    user_id: UUID,
    file_id: UUID,
    actor: Actor = Depends(current_actor),
    engine: MovementEngine = Depends(get_engine),
):
    """Return a file to the registry."""
    return to_http_response(await engine.return_file(actor, file_id, user_id))


@router.delete("/{file_id}/logs/{log_name}", response_model=MovementResponse)
async def clear_log(
    file_id: UUID,
    log_name: str,
    actor: Actor = Depends(current_actor),
    engine: MovementEngine = Depends(get_engine),
):
    """Clear one of a file's movement logs: requests, charges or returns."""
    return to_http_response(await engine.clear_log(actor, file_id, log_name))


@router.get("/{file_id}/history", response_model=MovementHistoryResponse)
async def movement_history(
    file_id: UUID,
    actor: Actor = Depends(current_actor),
    engine: MovementEngine = Depends(get_engine),
):
    """Request, charge and return logs of a file, oldest first."""
    result = await engine.history(file_id)
    if not result.ok:
        return to_http_response(result)
    file = result.data["file"]
    return MovementHistoryResponse.model_validate({
        "file_id": file.id,
        "location": file.location,
        "current_holder_id": file.current_holder_id,
        "requests": [RequestEntry.model_validate(r) for r in result.data["requests"]],
        "charges": [ChargeEntry.model_validate(c) for c in result.data["charges"]],
        "returns": [ReturnEntry.model_validate(r) for r in result.data["returns"]],
    })


@router.post("/reconcile", response_model=MovementResponse)
async def reconcile(
    actor: Actor = Depends(require_admin_actor),
    engine: MovementEngine = Depends(get_engine),
):
    """Repair held-file sets from each file's recorded holder."""
    return to_http_response(await engine.reconcile())


def to_http_response(result: OperationResult):
    body = MovementResponse(
        status=result.status.value,
        message=result.message,
        already_satisfied=result.status == ResultStatus.ALREADY_SATISFIED,
        data={to_camel(k): v for k, v in result.data.items()} or None,
    )
    return JSONResponse(
        status_code=HTTP_STATUS[result.status],
        content=body.model_dump(mode="json", by_alias=True),
    )
