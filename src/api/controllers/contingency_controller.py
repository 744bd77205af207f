"""
Contingency outbox controller handling HTTP requests/responses only.
"""

from fastapi import APIRouter, Depends, Query

from api.dependencies import ServiceContainer, get_container
from api.models.responses import (
    AutoSubmissionResponse,
    CleanupResponse,
    ContingencyRequestListResponse,
    ContingencyStatsResponse,
    RequestRemovalResponse,
)
from api.utils.error_utils import handle_domain_error
from core.exceptions import (
    ContingencyRequestNotFoundError,
    ContingencyRequestStateError,
)
from core.models.contingency import (
    ContingencySubmissionOutcome,
    ContingencySubmissionResult,
)

router = APIRouter(
    prefix="/contingency",
    tags=["contingency"],
)


@router.get(
    "/requests",
    response_model=ContingencyRequestListResponse,
    summary="List contingency requests",
    description="Requests in the outbox, oldest first.",
)
async def list_requests(
    pending_only: bool = Query(False, description="Only requests not yet submitted"),
    container: ServiceContainer = Depends(get_container),
):
    manager = container.contingency_manager
    if pending_only:
        requests = await manager.get_pending_requests()
    else:
        requests = await manager.get_all_requests()
    return ContingencyRequestListResponse(requests=requests, count=len(requests))


@router.get(
    "/stats",
    response_model=ContingencyStatsResponse,
    summary="Contingency statistics",
)
async def get_stats(container: ServiceContainer = Depends(get_container)):
    manager = container.contingency_manager
    stats = await manager.get_contingency_stats()
    return ContingencyStatsResponse(
        **stats.model_dump(),
        auto_submission_active=manager.is_auto_submission_active(),
    )


@router.post(
    "/submit",
    response_model=ContingencySubmissionResult,
    summary="Submit pending requests",
    description="Run one sweep of the outbox now.",
)
async def submit_pending(container: ServiceContainer = Depends(get_container)):
    return await container.contingency_manager.submit_pending_requests()


@router.post(
    "/requests/{request_id}/retry",
    response_model=ContingencySubmissionOutcome,
    summary="Retry a contingency request",
    description="Resubmit one request, including rejected or exhausted ones.",
    responses={
        404: {"description": "Request not found"},
        409: {"description": "Request already submitted or being submitted"},
    },
)
async def retry_request(
    request_id: str, container: ServiceContainer = Depends(get_container)
):
    try:
        return await container.contingency_manager.retry_request(request_id)
    except (ContingencyRequestNotFoundError, ContingencyRequestStateError) as e:
        return handle_domain_error(e)


@router.delete(
    "/requests/{request_id}",
    response_model=RequestRemovalResponse,
    summary="Remove a contingency request",
    responses={
        404: {"description": "Request not found"},
        409: {"description": "Request was submitted and force was not set"},
    },
)
async def remove_request(
    request_id: str,
    force: bool = Query(False, description="Also remove submitted requests"),
    container: ServiceContainer = Depends(get_container),
):
    try:
        removed = await container.contingency_manager.remove_request(
            request_id, force=force
        )
    except ContingencyRequestStateError as e:
        return handle_domain_error(e)

    if not removed:
        return handle_domain_error(ContingencyRequestNotFoundError(request_id))
    return RequestRemovalResponse(request_id=request_id, removed=True)


@router.post(
    "/cleanup",
    response_model=CleanupResponse,
    summary="Purge old requests",
    description="Remove submitted or exhausted requests past the retention window.",
)
async def cleanup(container: ServiceContainer = Depends(get_container)):
    removed = await container.contingency_manager.cleanup_old_requests()
    return CleanupResponse(removed=removed)


@router.post("/auto-submission/start", response_model=AutoSubmissionResponse)
async def start_auto_submission(container: ServiceContainer = Depends(get_container)):
    manager = container.contingency_manager
    changed = manager.start_auto_submission()
    return AutoSubmissionResponse(
        active=manager.is_auto_submission_active(), changed=changed
    )


@router.post("/auto-submission/stop", response_model=AutoSubmissionResponse)
async def stop_auto_submission(container: ServiceContainer = Depends(get_container)):
    manager = container.contingency_manager
    changed = manager.stop_auto_submission()
    return AutoSubmissionResponse(
        active=manager.is_auto_submission_active(), changed=changed
    )
